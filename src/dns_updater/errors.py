"""Exception hierarchy shared by the resolver, the API client and the driver."""
from __future__ import annotations

from typing import Sequence


class UpdaterError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(UpdaterError, ValueError):
    """Required configuration is missing or malformed."""


class ResolutionError(UpdaterError):
    """The public address echo lookup failed."""


class APICommunicationError(UpdaterError):
    """The provider API could not be reached or timed out."""


class APIError(UpdaterError):
    """The provider answered but reported an unsuccessful call.

    Attributes:
        errors: Error messages from the response envelope.
        messages: Informational messages from the response envelope.
        status_code: HTTP status of the response, when known.
    """

    def __init__(
        self,
        errors: Sequence[str] = (),
        messages: Sequence[str] = (),
        status_code: int | None = None,
    ) -> None:
        self.errors = list(errors)
        self.messages = list(messages)
        self.status_code = status_code
        lines = [f"Error: {msg}" for msg in self.errors]
        lines.extend(f"Message: {msg}" for msg in self.messages)
        if not lines and status_code is not None:
            lines.append(f"HTTP status {status_code}")
        super().__init__("unsuccessful API call:\n" + "\n".join(lines))


class RecordLookupError(UpdaterError):
    """The provider did not return exactly one record for a name and type."""

    reason = "record lookup failed"

    def __init__(self, record_type: str, name: str) -> None:
        self.record_type = record_type
        self.name = name
        super().__init__(f"{self.reason}: {record_type} {name}")


class RecordNotFoundError(RecordLookupError):
    """No record matches the name and type."""

    reason = "no matching DNS record found"


class AmbiguousRecordError(RecordLookupError):
    """More than one record matches the name and type."""

    reason = "found more than one matching DNS record"


class MalformedRecordError(UpdaterError):
    """The provider returned a record entry without the expected fields."""
