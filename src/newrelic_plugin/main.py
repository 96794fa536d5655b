"""CLI entry point for the site metrics plugin.

Usage:
    python -m src.newrelic_plugin.main -u https://example.com -k LICENSE_KEY -h web1.example.com

Prints the raw API response to stdout. Exits silently when the site has no
metrics to report.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from src.common.config import Settings
from src.common.http_client import HTTPClient
from src.common.logging import setup_logging

from .collector import collect
from .errors import PreconditionError, TransportError

# Named explicitly: under "python -m" __name__ is "__main__"
logger = logging.getLogger("src.newrelic_plugin.main")

EXIT_PRECONDITION = 1
EXIT_TRANSPORT = 2


def build_parser() -> argparse.ArgumentParser:
    # -h is the host, as in the original plugin, so help is --help only
    parser = argparse.ArgumentParser(
        description="Send site statistics to the New Relic platform API",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this message and exit")
    parser.add_argument(
        "-u", "--url",
        dest="base_url",
        required=True,
        help="Base URL of the site exposing the statistics",
    )
    parser.add_argument(
        "-k", "--key",
        required=True,
        help="License key (also the key of the site's statistics endpoint)",
    )
    parser.add_argument(
        "-h", "--host",
        required=True,
        help="FQDN of the machine reporting the metrics",
    )
    parser.add_argument(
        "--pid",
        type=int,
        default=0,
        help="Optional agent process id",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a settings.yaml (default: config/settings.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(level=logging.INFO if args.verbose else logging.WARNING)
    if args.config is not None and not args.config.is_file():
        logger.error("Settings file not found: %s", args.config)
        return EXIT_PRECONDITION

    try:
        settings = Settings.load(args.config)
    except (ValueError, yaml.YAMLError) as exc:
        logger.error("Invalid settings: %s", exc)
        return EXIT_PRECONDITION

    try:
        with HTTPClient(settings.source) as client:
            request = collect(
                client,
                base_url=args.base_url,
                key=args.key,
                host=args.host,
                pid=args.pid,
                settings=settings,
            )
    except PreconditionError as exc:
        logger.error("Unable to make request: %s", exc)
        return EXIT_PRECONDITION
    except TransportError as exc:
        logger.error("%s", exc)
        return EXIT_TRANSPORT

    if request is None:
        return 0

    print(request.response)
    return 0


if __name__ == "__main__":
    sys.exit(main())
