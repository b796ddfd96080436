"""CLI for the dynamic DNS updater."""
from __future__ import annotations

import argparse
import logging
import sys

from .cloudflare import CloudflareDNS
from .config import load_settings
from .errors import ConfigError
from .resolver import PublicAddressResolver
from .updater import reconcile

EXIT_OK = 0
EXIT_RECORD_FAILED = 1
EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed CLI options:
            - config (str | None): Path to an optional YAML config file.
            - domain (str | None): Domain whose records are updated.
            - ttl (int | None): TTL to set on updated records.
            - timeout_millis (int | None): DNS query timeout.
            - log_level (str): Logging level.
    """
    parser = argparse.ArgumentParser(
        description="Update Cloudflare A/AAAA records to the host's public addresses",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", help="Path to YAML config (or $DNS_UPDATER_CONFIG)")
    parser.add_argument("--domain", help="Domain name to update (or $DOMAIN_NAME)")
    parser.add_argument("--ttl", type=int, help="TTL to set on the DNS records (default 60)")
    parser.add_argument(
        "--timeout-millis",
        "--timeout_millis",
        dest="timeout_millis",
        type=int,
        help="Timeout in milliseconds for DNS queries (default 10000)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run one reconciliation pass.

    Returns:
        Process exit status: 2 on configuration error, 1 if any record type
        failed, 0 otherwise.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(
            config_path=args.config,
            domain=args.domain,
            ttl=args.ttl,
            timeout_millis=args.timeout_millis,
        )
        client = CloudflareDNS.from_credentials(settings.credentials)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR

    resolver = PublicAddressResolver(timeout=settings.timeout)
    try:
        result = reconcile(client, resolver, settings.domain, settings.ttl)
    finally:
        client.close()

    return EXIT_OK if result.ok else EXIT_RECORD_FAILED


if __name__ == "__main__":
    sys.exit(main())
