"""Configuration loading from flags, environment and an optional YAML file."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TTL = 60
DEFAULT_TIMEOUT_MILLIS = 10000
# Cloudflare accepts 1 ("automatic") or 60..86400 seconds.
AUTO_TTL = 1
MIN_TTL = 60
MAX_TTL = 86400

CONFIG_PATH_ENV = "DNS_UPDATER_CONFIG"

# setting name -> (environment variable, YAML key)
CREDENTIAL_SOURCES: dict[str, tuple[str, str]] = {
    "zone_id": ("CF_ZONE_ID", "zone_id"),
    "account_id": ("CF_ACCOUNT_ID", "account_id"),
    "api_token": ("CF_API_TOKEN", "api_token"),
}
SETTING_SOURCES: dict[str, tuple[str, str]] = {
    "domain": ("DOMAIN_NAME", "domain"),
    "ttl": ("DNS_TTL", "ttl"),
    "timeout_millis": ("TIMEOUT_MILLIS", "timeout_millis"),
}


@dataclass(frozen=True, slots=True)
class Credentials:
    """Cloudflare API credentials scoped to one zone.

    Attributes:
        zone_id: Zone ID from the Cloudflare dashboard overview.
        account_id: Account ID from the Cloudflare dashboard overview.
        api_token: API token from the profile "API Tokens" page. Never shown
            in ``repr``.
    """

    zone_id: str
    account_id: str
    api_token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-wide settings, built once at startup.

    Attributes:
        credentials: Provider credentials.
        domain: Fully qualified name whose records are reconciled.
        ttl: TTL applied when a record is updated.
        timeout_millis: Bound for each network exchange, in milliseconds.
    """

    credentials: Credentials
    domain: str
    ttl: int = DEFAULT_TTL
    timeout_millis: int = DEFAULT_TIMEOUT_MILLIS

    @property
    def timeout(self) -> float:
        """Network timeout in seconds."""
        return self.timeout_millis / 1000.0


def read_config_file(path: str) -> dict[str, Any]:
    """Read the optional YAML configuration file.

    Args:
        path: Filesystem path to the YAML file.

    Returns:
        Parsed mapping (empty for an empty file).

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parsing error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: mapping required, got {type(data).__name__}")
    logger.debug("configuration file loaded: %s", path)
    return data


def _pick(
    name: str,
    sources: dict[str, tuple[str, str]],
    override: Any,
    environ: Mapping[str, str],
    file_data: Mapping[str, Any],
) -> Any:
    """Return the first non-blank value for a setting.

    Args:
        name: Setting name, a key of ``sources``.
        sources: Mapping of setting name to (environment variable, YAML key).
        override: Value given on the command line.
        environ: Environment mapping.
        file_data: Parsed YAML configuration.

    Returns:
        The value with surrounding whitespace removed from strings, or None
        when every source is absent or blank.
    """
    env_key, yaml_key = sources[name]
    for value in (override, environ.get(env_key), file_data.get(yaml_key)):
        if isinstance(value, str):
            value = value.strip()
        if value not in (None, ""):
            return value
    return None


def _to_int(name: str, value: Any, default: int) -> int:
    """Coerce a setting to ``int``.

    Args:
        name: Setting name used in the error message.
        value: Raw value, or None when unset.
        default: Value returned when ``value`` is None.

    Raises:
        ConfigError: If the value is a boolean or not an integer.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"invalid {name}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid {name}: {value!r}") from exc


def load_settings(
    environ: Mapping[str, str] | None = None,
    *,
    config_path: str | None = None,
    domain: str | None = None,
    ttl: int | None = None,
    timeout_millis: int | None = None,
) -> Settings:
    """Build settings from flags, environment and config file.

    Precedence is flag, then environment variable, then YAML file, then
    default.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``.
        config_path: YAML file path; falls back to ``$DNS_UPDATER_CONFIG``.
        domain: Domain given on the command line.
        ttl: TTL given on the command line.
        timeout_millis: DNS timeout given on the command line.

    Returns:
        Validated settings.

    Raises:
        ConfigError: Naming every missing required value, or the first
            malformed one.
    """
    if environ is None:
        environ = os.environ

    path = config_path or environ.get(CONFIG_PATH_ENV)
    file_data = read_config_file(path) if path else {}

    creds: dict[str, str] = {}
    missing: list[str] = []
    for name, (env_key, _) in CREDENTIAL_SOURCES.items():
        value = _pick(name, CREDENTIAL_SOURCES, None, environ, file_data)
        if value is None:
            missing.append(env_key)
        else:
            creds[name] = str(value)

    domain_value = _pick("domain", SETTING_SOURCES, domain, environ, file_data)
    if domain_value is None:
        missing.append("domain name (--domain flag or DOMAIN_NAME)")

    if missing:
        raise ConfigError("missing required configuration: " + ", ".join(missing))

    ttl_value = _to_int(
        "ttl", _pick("ttl", SETTING_SOURCES, ttl, environ, file_data), DEFAULT_TTL
    )
    if ttl_value != AUTO_TTL and not MIN_TTL <= ttl_value <= MAX_TTL:
        raise ConfigError(
            f"invalid ttl {ttl_value}: must be {AUTO_TTL} or between {MIN_TTL} and {MAX_TTL}"
        )

    timeout_value = _to_int(
        "timeout_millis",
        _pick("timeout_millis", SETTING_SOURCES, timeout_millis, environ, file_data),
        DEFAULT_TIMEOUT_MILLIS,
    )
    if timeout_value <= 0:
        raise ConfigError(f"invalid timeout_millis {timeout_value}: must be positive")

    return Settings(
        credentials=Credentials(**creds),
        domain=str(domain_value),
        ttl=ttl_value,
        timeout_millis=timeout_value,
    )
