"""Public contracts for reviewqueue."""

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
from reviewqueue.contracts.issue import Author, DiscoveryKind, IssueSnapshot, MergeableState, PullDetail
from reviewqueue.contracts.pr import BackendStatus, Pr, ScanResult
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.contracts.sources import (
    BorsQueue,
    BorsRow,
    BorsStatus,
    CraterQueue,
    CraterStatus,
    FcpInfo,
    FcpSnapshot,
    FcpStatus,
    Rollup,
    RollupQueue,
    RollupSetting,
)
from reviewqueue.contracts.status import CiStatus, PrStatus, QueueStatus, SortCategory, WaitReason

__all__ = [
    "AuthenticationError",
    "Author",
    "BackendStatus",
    "BorsQueue",
    "BorsRow",
    "BorsStatus",
    "CachePeriods",
    "CiStatus",
    "ConfigError",
    "CraterQueue",
    "CraterStatus",
    "DiscoveryKind",
    "FcpInfo",
    "FcpSnapshot",
    "FcpStatus",
    "IssueSnapshot",
    "LedgerError",
    "MergeableState",
    "PaginationConfig",
    "Pr",
    "PrStatus",
    "ProviderError",
    "PullDetail",
    "QueueStatus",
    "RepoConfig",
    "RepoRef",
    "ReviewQueueConfig",
    "ReviewQueueError",
    "Rollup",
    "RollupQueue",
    "RollupSetting",
    "ScanError",
    "ScanResult",
    "SortCategory",
    "SourceError",
    "SourceParseError",
    "WaitReason",
]
