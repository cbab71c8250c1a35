"""Public API surface for reviewqueue."""

__version__ = "0.1.0"

from reviewqueue.auth import create_token_resolver
from reviewqueue.config import load_config
from reviewqueue.contracts.config import CachePeriods, PaginationConfig, RepoConfig, ReviewQueueConfig
from reviewqueue.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    LedgerError,
    ProviderError,
    ReviewQueueError,
    ScanError,
    SourceError,
    SourceParseError,
)
from reviewqueue.contracts.pr import BackendStatus, Pr, ScanResult
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.contracts.status import CiStatus, SortCategory
from reviewqueue.engine.progress import NullScanProgress, ScanProgress
from reviewqueue.engine.scanner import Scanner
from reviewqueue.persistence.seen import SeenLedger
from reviewqueue.presentation import Bucket, RollupGroup, bucket_prs
from reviewqueue.sdk import ReviewQueue

__all__ = [
    "AuthenticationError",
    "BackendStatus",
    "Bucket",
    "CachePeriods",
    "CiStatus",
    "ConfigError",
    "LedgerError",
    "NullScanProgress",
    "PaginationConfig",
    "Pr",
    "ProviderError",
    "RepoConfig",
    "RepoRef",
    "ReviewQueue",
    "ReviewQueueConfig",
    "ReviewQueueError",
    "RollupGroup",
    "ScanError",
    "ScanProgress",
    "ScanResult",
    "Scanner",
    "SeenLedger",
    "SortCategory",
    "SourceError",
    "SourceParseError",
    "bucket_prs",
    "create_token_resolver",
    "load_config",
    "__version__",
]
