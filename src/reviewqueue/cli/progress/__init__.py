"""CLI progress displays."""

from reviewqueue.cli.progress.rich import RichScanProgress

__all__ = ["RichScanProgress"]
