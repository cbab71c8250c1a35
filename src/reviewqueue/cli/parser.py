"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("reviewqueue")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./reviewqueue.json", help="Path to reviewqueue.json")
    parser.add_argument(
        "--as",
        dest="as_user",
        default=None,
        metavar="USER",
        help="Build the queue for USER instead of the configured username",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reviewqueue")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Scan once and print the triage buckets")
    _add_common_arguments(scan_parser)

    watch_parser = subparsers.add_parser("watch", help="Re-scan every refresh_interval and reprint the buckets")
    _add_common_arguments(watch_parser)
    watch_parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Stop after this many refreshes (default: run until interrupted)",
    )

    return parser


__all__ = ["build_parser"]
