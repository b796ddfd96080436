"""Public address discovery through the OpenDNS echo service.

``myip.opendns.com`` resolved against an OpenDNS resolver answers with the
source address of the query. Sending the query over an IPv4 or an IPv6
socket therefore yields the host's public address for that family, as seen
from the internet rather than from local interface configuration.
"""
from __future__ import annotations

import ipaddress
import logging
import socket

from dnslib import QTYPE, RCODE, DNSRecord
from dnslib.dns import DNSError

from .errors import ResolutionError
from .records import RECORD_FAMILIES

logger = logging.getLogger(__name__)

ECHO_NAME = "myip.opendns.com"
ECHO_RESOLVER = "resolver1.opendns.com"
ECHO_PORT = 53
DEFAULT_TIMEOUT = 10.0


class PublicAddressResolver:
    """Resolve the host's public addresses, one family per query.

    Attributes:
        timeout: Bound on the UDP exchange, in seconds.
        echo_name: Name whose answer is the caller's address.
        resolver_host: Resolver that serves ``echo_name``.
        port: Resolver port.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        echo_name: str = ECHO_NAME,
        resolver_host: str = ECHO_RESOLVER,
        port: int = ECHO_PORT,
    ) -> None:
        self.timeout = timeout
        self.echo_name = echo_name
        self.resolver_host = resolver_host
        self.port = port

    def resolve(self, record_type: str) -> str:
        """Return the public address matching a record type.

        Args:
            record_type: ``A`` for IPv4, ``AAAA`` for IPv6.

        Returns:
            Address in canonical text form.

        Raises:
            ResolutionError: On timeout, transport or protocol failure, or
                when the reply carries no address of the requested family.
        """
        try:
            family = RECORD_FAMILIES[record_type]
        except KeyError:
            raise ResolutionError(f"unsupported record type {record_type!r}") from None

        server = self._server_address(family)
        question = DNSRecord.question(self.echo_name, record_type)
        try:
            packet = question.send(
                server,
                self.port,
                timeout=self.timeout,
                ipv6=family == socket.AF_INET6,
            )
        except socket.timeout as exc:
            raise ResolutionError(
                f"{record_type} lookup of {self.echo_name} via {server} timed out"
            ) from exc
        except OSError as exc:
            raise ResolutionError(
                f"{record_type} lookup of {self.echo_name} via {server} failed: {exc}"
            ) from exc

        try:
            reply = DNSRecord.parse(packet)
        except DNSError as exc:
            raise ResolutionError(f"malformed reply from {server}: {exc}") from exc

        if reply.header.id != question.header.id:
            raise ResolutionError(
                f"reply id {reply.header.id} does not match query id {question.header.id}"
            )
        if reply.header.rcode != RCODE.NOERROR:
            raise ResolutionError(
                f"{record_type} lookup of {self.echo_name} failed: {RCODE.get(reply.header.rcode)}"
            )

        qtype = getattr(QTYPE, record_type)
        answers = [rr for rr in reply.rr if rr.rtype == qtype]
        if not answers:
            raise ResolutionError(f"no {record_type} answer for {self.echo_name}")

        address = str(ipaddress.ip_address(str(answers[0].rdata)))
        logger.debug("public %s address: %s", record_type, address)
        return address

    def _server_address(self, family: int) -> str:
        """Resolve the echo resolver's hostname within one address family."""
        try:
            infos = socket.getaddrinfo(self.resolver_host, self.port, family, socket.SOCK_DGRAM)
        except OSError as exc:
            raise ResolutionError(
                f"cannot resolve {self.resolver_host} for {socket.AddressFamily(family).name}: {exc}"
            ) from exc
        if not infos:
            raise ResolutionError(f"no address for {self.resolver_host}")
        return infos[0][4][0]


def resolve_public_ipv4(timeout: float = DEFAULT_TIMEOUT) -> str:
    """Return the host's public IPv4 address."""
    return PublicAddressResolver(timeout).resolve("A")


def resolve_public_ipv6(timeout: float = DEFAULT_TIMEOUT) -> str:
    """Return the host's public IPv6 address."""
    return PublicAddressResolver(timeout).resolve("AAAA")
