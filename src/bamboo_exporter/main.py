"""Bamboo exporter entry point."""

import argparse
import os
import sys
import time
from typing import List, Optional

from prometheus_client import REGISTRY, disable_created_metrics, start_http_server

from . import __version__
from .bamboo import BambooClient
from .collector import DEFAULT_MAX_PAGES, BambooCollector
from .credentials import CredentialProvider, JsonFileCredentials, StaticCredentials
from .metrics import register_build_info
from .utils.logging import setup_logging


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in ("1", "true", "yes")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bamboo_exporter", description="Prometheus exporter for Bamboo metrics"
    )
    parser.add_argument(
        "--bamboo.uri",
        dest="bamboo_uri",
        default=os.getenv("BAMBOO_URI", "http://localhost:8085"),
        help="Full Bamboo URI to scrape metrics from.",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        default=_env_flag("BAMBOO_INSECURE"),
        help="Ignore server certificate if using https.",
    )
    parser.add_argument(
        "--web.listen-port",
        dest="port",
        type=int,
        default=int(os.getenv("BAMBOO_EXPORTER_PORT", "9117")),
        help="Port on which to expose metrics.",
    )
    parser.add_argument(
        "--credentials-file",
        default=os.getenv("BAMBOO_CREDENTIALS_FILE", "config.json"),
        help="JSON file holding bamboo_username and bamboo_password.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=float(os.getenv("BAMBOO_TIMEOUT", "30")),
        help="Read timeout in seconds for Bamboo API calls.",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=int(os.getenv("BAMBOO_RETRIES", "3")),
        help="Attempts per request on connection failures.",
    )
    parser.add_argument(
        "--max-result-pages",
        type=int,
        default=int(os.getenv("BAMBOO_MAX_RESULT_PAGES", str(DEFAULT_MAX_PAGES))),
        help="Upper bound on build-result pages fetched per scrape.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Log level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument(
        "--version", action="version", version=f"bamboo_exporter {__version__}"
    )
    return parser.parse_args(argv)


def build_credentials(args: argparse.Namespace) -> CredentialProvider:
    """Environment credentials win over the JSON credentials file."""
    username = os.getenv("BAMBOO_USERNAME")
    if username:
        return StaticCredentials(username, os.getenv("BAMBOO_PASSWORD", ""))
    return JsonFileCredentials(args.credentials_file)


def build_collector(args: argparse.Namespace) -> BambooCollector:
    client = BambooClient(
        args.bamboo_uri,
        build_credentials(args),
        insecure=args.insecure,
        timeout_read=args.timeout,
        retry_attempts=args.retries,
    )
    return BambooCollector(client, max_pages=args.max_result_pages)


def main(argv: Optional[List[str]] = None):
    """Entry point."""
    args = parse_args(argv)
    logger = setup_logging("bamboo_exporter", args.log_level)

    # Counters expose only their _total samples, no _created series.
    disable_created_metrics()
    collector = build_collector(args)
    REGISTRY.register(collector)
    register_build_info(__version__, REGISTRY)

    logger.info(f"Starting bamboo_exporter {__version__}")
    logger.info(f"Collecting metrics from {args.bamboo_uri}")

    start_http_server(args.port)
    logger.info(f"Prometheus metrics server started on port {args.port}")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        collector.client.close()
        logger.info("Exporter shutdown complete")


if __name__ == "__main__":
    sys.exit(main())
