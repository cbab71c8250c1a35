"""Scan command."""

from __future__ import annotations

import argparse

from rich.console import Console

from reviewqueue.cli.progress.rich import RichScanProgress
from reviewqueue.cli.render import render_result
from reviewqueue.contracts.pr import ScanResult


async def run_scan(args: argparse.Namespace, *, console: Console | None = None) -> ScanResult:
    import reviewqueue.cli as cli

    config = cli.load_config(args.config)
    console = console or Console()

    if not args.verbose:
        with RichScanProgress() as progress:
            queue = await cli.ReviewQueue.from_config(config, progress=progress)
            async with queue:
                result = await queue.get(args.as_user)
                status = queue.status(args.as_user)
    else:
        queue = await cli.ReviewQueue.from_config(config)
        async with queue:
            result = await queue.get(args.as_user)
            status = queue.status(args.as_user)

    render_result(console, result, status=status)
    return result


__all__ = ["run_scan"]
