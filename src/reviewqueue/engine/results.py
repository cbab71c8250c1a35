"""Per-user cache of completed scan results.

Each user has at most one scan in flight. Readers get the last completed
result immediately; a failed refresh keeps serving the previous result and
records the error so callers can mark the list as stale.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from reviewqueue.contracts.exceptions import AuthenticationError, LedgerError, ReviewQueueError, ScanError
from reviewqueue.contracts.pr import BackendStatus, Pr, ScanResult

_LOG = logging.getLogger(__name__)

ScanFactory = Callable[[str], AsyncIterator[Pr]]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class _UserSlot:
    result: ScanResult | None = None
    in_flight: asyncio.Task[ScanResult | None] | None = None
    last_error: ReviewQueueError | None = None


class UserResultCache:
    """Holds the latest ``ScanResult`` per username.

    Args:
        scan: Starts a fresh scan for a username.
        on_complete: Called with every successfully completed result.
    """

    def __init__(
        self,
        scan: ScanFactory,
        *,
        on_complete: Callable[[ScanResult], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._scan = scan
        self._on_complete = on_complete
        self._clock = clock
        self._slots: dict[str, _UserSlot] = {}

    def _slot(self, username: str) -> _UserSlot:
        return self._slots.setdefault(username, _UserSlot())

    def peek(self, username: str) -> ScanResult | None:
        """The last completed result, without triggering anything."""
        slot = self._slots.get(username)
        return slot.result if slot is not None else None

    def refresh(self, username: str) -> asyncio.Task[ScanResult | None]:
        """Start a scan unless one is already running; returns the in-flight task."""
        slot = self._slot(username)
        if slot.in_flight is None:
            _LOG.debug("Starting refresh for %s", username)
            slot.in_flight = asyncio.create_task(self._run(username, slot))
        return slot.in_flight

    async def get(self, username: str) -> ScanResult:
        """Return the last completed result, waiting for the first scan if needed.

        Raises:
            AuthenticationError: If no scan has ever completed and the pending
                one was rejected by GitHub.
            ScanError: If no scan has ever completed and the pending one fails.
        """
        slot = self._slot(username)
        if slot.result is not None:
            return slot.result

        # Shielded so a cancelled reader does not cancel the shared scan.
        result = await asyncio.shield(self.refresh(username))
        if result is None:
            if isinstance(slot.last_error, AuthenticationError):
                raise slot.last_error
            raise ScanError(f"Scan for {username} failed: {slot.last_error}") from slot.last_error
        return result

    async def get_and_refresh(self, username: str) -> ScanResult:
        """Return the current result and start a background refresh."""
        had_result = self.peek(username) is not None
        result = await self.get(username)
        if had_result:
            self.refresh(username)
        return result

    def status(self, username: str) -> BackendStatus:
        slot = self._slots.get(username)
        if slot is None:
            return BackendStatus()
        if slot.in_flight is not None:
            state = "refreshing"
        elif slot.result is not None:
            state = "idle"
        else:
            state = "uninitialized"
        return BackendStatus(
            state=state,
            last_refresh=slot.result.completed_at if slot.result is not None else None,
            last_error=str(slot.last_error) if slot.last_error is not None else None,
        )

    async def _run(self, username: str, slot: _UserSlot) -> ScanResult | None:
        try:
            prs = [pr async for pr in self._scan(username)]
        except ReviewQueueError as exc:
            _LOG.error("Refresh for %s failed, keeping previous result: %s", username, exc)
            slot.last_error = exc
            return None
        finally:
            slot.in_flight = None

        result = ScanResult(username=username, prs=tuple(prs), completed_at=self._clock())
        slot.result = result
        slot.last_error = None
        _LOG.info("Refresh for %s finished with %d pull requests", username, len(result.prs))

        if self._on_complete is not None:
            try:
                self._on_complete(result)
            except LedgerError as exc:
                _LOG.error("Could not record scan for %s: %s", username, exc)
        return result
