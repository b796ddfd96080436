"""Reconciliation of provider records against the host's public addresses."""
from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from .errors import UpdaterError
from .records import SUPPORTED_ORDER, DNSRecord

logger = logging.getLogger(__name__)


class RecordClient(Protocol):
    """Provider API used by the driver; see ``CloudflareDNS``."""

    def fetch_record(self, record_type: str, name: str) -> DNSRecord: ...

    def update_record(
        self, identifier: str, record_type: str, name: str, content: str, ttl: int
    ) -> None: ...


class AddressResolver(Protocol):
    """Public address source; see ``PublicAddressResolver``."""

    def resolve(self, record_type: str) -> str: ...


@dataclass(frozen=True, slots=True)
class RecordChange:
    """A record whose content was replaced.

    Attributes:
        record_type (str): DNS record type.
        name (str): Fully qualified record name.
        old (str): Content before the update.
        new (str): Content after the update.
    """

    record_type: str
    name: str
    old: str
    new: str


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one reconciliation pass.

    Attributes:
        changes: Records that were updated.
        unchanged: Record types already matching the host.
        errors: Failure per record type.
    """

    changes: list[RecordChange] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    errors: dict[str, UpdaterError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when no record type failed."""
        return not self.errors


def same_address(published: str, actual: str) -> bool:
    """Compare two addresses in canonical form.

    Falls back to exact string comparison when either side is not an IP
    address.
    """
    try:
        return ipaddress.ip_address(published) == ipaddress.ip_address(actual)
    except ValueError:
        return published == actual


def update_dns_record(
    client: RecordClient,
    resolver: AddressResolver,
    record_type: str,
    domain: str,
    ttl: int,
) -> RecordChange | None:
    """Bring one record in line with the host's public address.

    Args:
        client: Provider API client.
        resolver: Public address resolver.
        record_type: ``A`` or ``AAAA``.
        domain: Record name.
        ttl: TTL applied on update.

    Returns:
        The change made, or None when the record already matched.

    Raises:
        UpdaterError: From the fetch, the resolution or the update.
    """
    record = client.fetch_record(record_type, domain)
    address = resolver.resolve(record_type)

    if same_address(record.content, address):
        logger.info("%s %s record is up to date (%s)", record.name, record.record_type, record.content)
        return None

    logger.info(
        "DNS %s %s record content (%s) differs from host (%s). Updating...",
        record.name,
        record.record_type,
        record.content,
        address,
    )
    client.update_record(record.identifier, record.record_type, record.name, address, ttl)
    logger.info("Updated %s record of %s to %s", record.record_type, record.name, address)
    return RecordChange(record.record_type, record.name, record.content, address)


def reconcile(
    client: RecordClient,
    resolver: AddressResolver,
    domain: str,
    ttl: int,
    record_types: Iterable[str] = SUPPORTED_ORDER,
) -> ReconcileResult:
    """Run one reconciliation pass, isolating failures per record type."""
    result = ReconcileResult()
    for record_type in record_types:
        try:
            change = update_dns_record(client, resolver, record_type, domain, ttl)
        except UpdaterError as exc:
            logger.error("Error updating %s record: %s", record_type, exc)
            result.errors[record_type] = exc
            continue
        if change is None:
            result.unchanged.append(record_type)
        else:
            result.changes.append(change)
    return result
