"""Progress reporting protocol for scans.

The scanner emits phase lifecycle events; consumers (e.g. the CLI's Rich
progress bar) implement ``ScanProgress`` to render feedback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ScanProgress(ABC):
    """Observer interface for scan progress events.

    Phases are ``Discover`` (issue listings, one item per listing) and
    ``Resolve`` (one item per pull request). Neither total is known up
    front, so ``item_found`` grows the total as work is discovered.
    """

    @abstractmethod
    def phase_start(self, phase: str, total: int | None = None) -> None:
        """A scan phase is starting. *total* is ``None`` for indeterminate phases."""
        ...  # pragma: no cover

    @abstractmethod
    def item_found(self, phase: str) -> None:
        """One more item was queued within *phase*."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str) -> None:
        """One item within *phase* has completed."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: str) -> None:
        """The *phase* has finished successfully."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The *phase* was interrupted by *error*."""
        ...  # pragma: no cover


class NullScanProgress(ScanProgress):
    """No-op implementation used when no progress display is requested."""

    def phase_start(self, phase: str, total: int | None = None) -> None:
        pass

    def item_found(self, phase: str) -> None:
        pass

    def item_done(self, phase: str) -> None:
        pass

    def phase_done(self, phase: str) -> None:
        pass

    def phase_error(self, phase: str, error: BaseException) -> None:
        pass
