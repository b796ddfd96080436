"""Data structures representing provider-side DNS records."""
from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Any

# Record types this tool manages, and the address family each one publishes.
RECORD_FAMILIES: dict[str, int] = {
    "A": socket.AF_INET,
    "AAAA": socket.AF_INET6,
}
SUPPORTED_ORDER: tuple[str, ...] = ("A", "AAAA")


@dataclass(frozen=True, slots=True)
class DNSRecord:
    """Snapshot of one DNS record as last fetched from the provider.

    Attributes:
        identifier (str): Provider-assigned record id, required for updates.
        name (str): Fully qualified domain name.
        record_type (str): DNS record type (A or AAAA).
        content (str): Address currently published.
    """

    identifier: str
    name: str
    record_type: str
    content: str


@dataclass(frozen=True, slots=True)
class UpdateRequest:
    """Patch sent to the provider when a record drifts.

    Attributes:
        identifier (str): Record id the patch is addressed to.
        record_type (str): DNS record type.
        name (str): Fully qualified domain name.
        content (str): New address.
        ttl (int): Time to live, in seconds.
    """

    identifier: str
    record_type: str
    name: str
    content: str
    ttl: int

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body of a record patch.

        Returns:
            Mapping with ``proxied`` always disabled.
        """
        return {
            "type": self.record_type,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl,
            "proxied": False,
        }
