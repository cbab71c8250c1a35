"""Core engine-domain exports."""

from .cache import Cache, KeyedCache
from .correlate import SourceSnapshots, resolve_pr, resolve_status
from .paginate import Page, paginate_with_retry
from .progress import NullScanProgress, ScanProgress
from .results import UserResultCache
from .scanner import Scanner

__all__ = [
    "Cache",
    "KeyedCache",
    "NullScanProgress",
    "Page",
    "ScanProgress",
    "Scanner",
    "SourceSnapshots",
    "UserResultCache",
    "paginate_with_retry",
    "resolve_pr",
    "resolve_status",
]
