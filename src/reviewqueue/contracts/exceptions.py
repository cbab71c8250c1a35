"""Exception hierarchy for reviewqueue.

All reviewqueue exceptions inherit from :class:`ReviewQueueError`, so callers
can catch any library error with a single ``except`` clause while still
handling specific failure modes.
"""

from __future__ import annotations


class ReviewQueueError(Exception):
    """Base exception for all reviewqueue errors."""


class ConfigError(ReviewQueueError):
    """Configuration loading or validation failure."""


class SourceError(ReviewQueueError):
    """An auxiliary data source (bors, crater, rfcbot) could not be fetched.

    Attributes:
        source: Short name of the failing source.
    """

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class SourceParseError(SourceError):
    """A source responded, but its payload could not be parsed at all."""


class ProviderError(ReviewQueueError):
    """A GitHub API call failed unexpectedly."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """Authentication/authorization failure."""


class ScanError(ReviewQueueError):
    """A scan for one user could not be started or completed."""


class LedgerError(ReviewQueueError):
    """The seen-issue ledger could not be read or written."""
