"""Cloudflare v4 API client for reading and patching a single DNS record."""
from __future__ import annotations

import logging
from typing import Any

import requests

from .config import Credentials
from .errors import (
    AmbiguousRecordError,
    APICommunicationError,
    APIError,
    ConfigError,
    MalformedRecordError,
    RecordNotFoundError,
)
from .records import DNSRecord, UpdateRequest

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_TIMEOUT = 30.0
PER_PAGE = 100


class CloudflareDNS:
    """Authenticated access to the DNS records of one Cloudflare zone.

    Args:
        zone_id: Zone the records belong to.
        account_id: Account owning the zone.
        api_token: Bearer token with DNS edit permission on the zone.
        session: HTTP session to use; a new one is created when omitted.
        base_url: API root, overridable for tests.
        timeout: Default per-request timeout, in seconds; DEFAULT_TIMEOUT
            when None. Requests are never sent without a timeout.

    Raises:
        ConfigError: If any credential is empty.
    """

    def __init__(
        self,
        zone_id: str,
        account_id: str,
        api_token: str,
        session: requests.Session | None = None,
        base_url: str = API_BASE_URL,
        timeout: float | None = None,
    ) -> None:
        missing = [
            label
            for label, value in (
                ("zone id", zone_id),
                ("account id", account_id),
                ("API token", api_token),
            )
            if not value
        ]
        if missing:
            raise ConfigError("missing Cloudflare credentials: " + ", ".join(missing))

        self.zone_id = zone_id
        self.account_id = account_id
        self._api_token = api_token
        self.session = session if session is not None else requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout

    @classmethod
    def from_credentials(cls, credentials: Credentials, **kwargs: Any) -> "CloudflareDNS":
        """Build a client from a credentials value object."""
        return cls(credentials.zone_id, credentials.account_id, credentials.api_token, **kwargs)

    def fetch_record(self, record_type: str, name: str, timeout: float | None = None) -> DNSRecord:
        """Fetch the single record matching a type and name.

        Args:
            record_type: DNS record type (A or AAAA).
            name: Fully qualified record name.
            timeout: Request timeout in seconds; client default when None.

        Returns:
            Snapshot of the matching record.

        Raises:
            APICommunicationError: On transport failure or timeout.
            APIError: If the provider reports an unsuccessful call.
            RecordNotFoundError: If no record matches.
            AmbiguousRecordError: If more than one record matches.
            MalformedRecordError: If the result is not a list of record objects
                carrying an id and content.
        """
        envelope = self._request(
            "GET",
            f"/zones/{self.zone_id}/dns_records",
            params={"page": 1, "per_page": PER_PAGE, "type": record_type, "name": name},
            timeout=timeout,
        )
        results = envelope.get("result") or []
        if not isinstance(results, list):
            raise MalformedRecordError(
                f"{record_type} {name}: expected a list of records, got {type(results).__name__}"
            )
        if not results:
            raise RecordNotFoundError(record_type, name)
        if len(results) > 1:
            raise AmbiguousRecordError(record_type, name)

        record = to_record(results[0])
        logger.debug("%s %s record contains %s", record.name, record.record_type, record.content)
        return record

    def update_record(
        self,
        identifier: str,
        record_type: str,
        name: str,
        content: str,
        ttl: int,
        timeout: float | None = None,
    ) -> None:
        """Patch a record's content; the record is never proxied.

        Args:
            identifier: Provider id of the record.
            record_type: DNS record type.
            name: Fully qualified record name.
            content: New address.
            ttl: TTL in seconds.
            timeout: Request timeout in seconds; client default when None.

        Raises:
            APICommunicationError: On transport failure or timeout.
            APIError: If the provider reports an unsuccessful call.
        """
        patch = UpdateRequest(identifier, record_type, name, content, ttl)
        self._request(
            "PATCH",
            f"/zones/{self.zone_id}/dns_records/{identifier}",
            json=patch.to_payload(),
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def _headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, timeout: float | None = None, **kwargs: Any) -> dict[str, Any]:
        """Send an authenticated request and decode the response envelope.

        Args:
            method: HTTP method.
            path: Path below the API root.
            timeout: Request timeout in seconds; client default when None.
            **kwargs: Passed to ``requests.Session.request``.

        Returns:
            The decoded envelope of a successful call.

        Raises:
            APICommunicationError: On transport failure or timeout.
            APIError: If the body is not an envelope or reports failure.
        """
        url = self.base_url + path
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout if timeout is None else timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            raise APICommunicationError(f"{method} {url} timed out") from exc
        except requests.RequestException as exc:
            raise APICommunicationError(f"{method} {url} failed: {exc}") from exc

        try:
            envelope = resp.json()
        except ValueError as exc:
            raise APIError(status_code=resp.status_code) from exc
        if not isinstance(envelope, dict):
            raise APIError(status_code=resp.status_code)

        if not envelope.get("success"):
            raise APIError(
                errors=_message_texts(envelope.get("errors")),
                messages=_message_texts(envelope.get("messages")),
                status_code=resp.status_code,
            )
        return envelope


def to_record(entry: dict[str, Any]) -> DNSRecord:
    """Map one ``result`` entry of a Cloudflare response to a record.

    Args:
        entry: Decoded record object.

    Returns:
        Record snapshot.

    Raises:
        MalformedRecordError: If the entry is not an object, or lacks a
            non-empty string ``id`` or ``content``.
    """
    if not isinstance(entry, dict):
        raise MalformedRecordError(f"record entry must be an object, got {type(entry).__name__}")
    for key in ("id", "content"):
        value = entry.get(key)
        if not isinstance(value, str) or not value:
            raise MalformedRecordError(f"record entry has no {key}: {entry!r}")
    return DNSRecord(
        identifier=entry["id"],
        name=str(entry.get("name", "")),
        record_type=str(entry.get("type", "")),
        content=entry["content"],
    )


def _message_texts(items: Any) -> list[str]:
    """Flatten an ``errors``/``messages`` list into plain strings.

    Entries are either strings or objects with a ``message`` key.
    """
    texts: list[str] = []
    for item in items or []:
        if isinstance(item, dict):
            texts.append(str(item.get("message", item)))
        else:
            texts.append(str(item))
    return texts
