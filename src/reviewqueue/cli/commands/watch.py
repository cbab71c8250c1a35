"""Watch command: keep rescanning through the per-user result cache."""

from __future__ import annotations

import argparse
import asyncio
import logging

from rich.console import Console

from reviewqueue.cli.render import render_result
from reviewqueue.contracts.pr import ScanResult

_LOG = logging.getLogger(__name__)


async def run_watch(args: argparse.Namespace, *, console: Console | None = None) -> ScanResult:
    """Print the current buckets every ``refresh_interval`` seconds.

    Each round shows the last completed result and starts a background
    refresh, so a slow or failing scan never blanks the screen.
    """
    import reviewqueue.cli as cli

    config = cli.load_config(args.config)
    console = console or Console()
    iterations = getattr(args, "iterations", None)

    queue = await cli.ReviewQueue.from_config(config)
    async with queue:
        rounds = 0
        while True:
            result = await queue.get_and_refresh(args.as_user)
            status = queue.status(args.as_user)
            if not args.verbose:
                console.clear()
            render_result(console, result, status=status)
            rounds += 1
            if iterations is not None and rounds >= iterations:
                return result
            _LOG.debug("Next refresh in %.0fs", config.refresh_interval)
            await asyncio.sleep(config.refresh_interval)


__all__ = ["run_watch"]
