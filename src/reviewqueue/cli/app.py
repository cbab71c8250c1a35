"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from reviewqueue.contracts.exceptions import AuthenticationError, ConfigError, LedgerError, ProviderError, ScanError


def main(argv: list[str] | None = None) -> int:
    import reviewqueue.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)
    else:
        cli.logging.basicConfig(level=cli.logging.WARNING, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "scan":
            cli.asyncio.run(cli._run_scan(args))
        elif args.command == "watch":
            cli.asyncio.run(cli._run_watch(args))
        return 0
    except KeyboardInterrupt:
        return 130
    except (ConfigError, LedgerError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, ProviderError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except ScanError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
