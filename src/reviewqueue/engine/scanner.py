"""Repository scan orchestration.

A scan lists the user's issues across every configured repository, fetches
each pull request's detail under a shared concurrency limit, correlates it
against the cached source snapshots and yields resolved ``Pr`` values in
completion order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Protocol

from reviewqueue.contracts.exceptions import AuthenticationError, ReviewQueueError, ScanError
from reviewqueue.contracts.issue import Author, DiscoveryKind, IssueSnapshot, PullDetail
from reviewqueue.contracts.pr import Pr
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.contracts.sources import BorsQueue, CraterQueue, FcpSnapshot, RollupQueue
from reviewqueue.engine.correlate import SourceSnapshots, resolve_pr
from reviewqueue.engine.progress import NullScanProgress, ScanProgress

_LOG = logging.getLogger(__name__)

PHASE_DISCOVER = "Discover"
PHASE_RESOLVE = "Resolve"


class IssueSource(Protocol):
    """The GitHub operations a scan needs."""

    async def get_viewer(self) -> Author: ...

    def iter_repo_issues(
        self,
        repo: RepoRef,
        *,
        creator: str | None = None,
        assignee: str | None = None,
    ) -> AsyncIterator[IssueSnapshot]: ...

    def iter_subscribed_issues(self) -> AsyncIterator[IssueSnapshot]: ...

    async def get_pull(self, repo: RepoRef, number: int) -> PullDetail: ...


class SnapshotSource(Protocol):
    """Cached access to the auxiliary sources; never raises for source failures."""

    async def bors_queue(self, repo: RepoRef) -> BorsQueue: ...

    async def rollups(self, repo: RepoRef, github: IssueSource) -> RollupQueue: ...

    async def crater_queue(self) -> CraterQueue: ...

    async def fcp_snapshot(self) -> FcpSnapshot: ...


class Scanner:
    """Scans the configured repositories for one user.

    ``username`` is whose queue is built. When it differs from the
    authenticated viewer the scan is impersonating, and subscribed issues
    (which belong to the viewer) are skipped.
    """

    def __init__(
        self,
        *,
        github: IssueSource,
        hub: SnapshotSource,
        repos: Sequence[RepoRef],
        username: str,
        include_subscribed: bool = True,
        semaphore: asyncio.Semaphore | None = None,
        progress: ScanProgress | None = None,
    ) -> None:
        self._github = github
        self._hub = hub
        self._repos = list(repos)
        self._username = username
        self._include_subscribed = include_subscribed
        self._semaphore = semaphore or asyncio.Semaphore(100)
        self._progress = progress or NullScanProgress()

    async def scan(self) -> AsyncIterator[Pr]:
        """Yield every open pull request relevant to the user, unordered.

        Raises:
            AuthenticationError: If the viewer cannot be authenticated.
            ScanError: If the scan fails for any reason other than a single
                listing, source or pull request.
        """
        try:
            viewer = await self._github.get_viewer()
        except AuthenticationError:
            raise
        except ReviewQueueError as exc:
            raise ScanError(f"Could not reach GitHub to scan for {self._username}: {exc}") from exc
        impersonating = viewer.name.casefold() != self._username.casefold()
        _LOG.info("Scanning %d repositories for %s as %s", len(self._repos), self._username, viewer.name)

        run = _ScanRun(self, impersonating=impersonating)
        runner = asyncio.create_task(run.execute())
        try:
            while True:
                pr = await run.results.get()
                if pr is None:
                    break
                yield pr
        finally:
            if not runner.done():
                runner.cancel()
            try:
                await runner
            except asyncio.CancelledError:
                pass
            except Exception as exc:
                raise ScanError(f"Scan for {self._username} failed: {exc}") from exc


class _ScanRun:
    """State of one scan: dedupe set, shared snapshot tasks and the result queue."""

    def __init__(self, scanner: Scanner, *, impersonating: bool) -> None:
        self._scanner = scanner
        self._impersonating = impersonating
        self._github = scanner._github
        self._hub = scanner._hub
        self._progress = scanner._progress
        self.results: asyncio.Queue[Pr | None] = asyncio.Queue()
        self._seen: set[tuple[RepoRef, int]] = set()
        self._repo_snapshots: dict[RepoRef, asyncio.Task[tuple[BorsQueue, RollupQueue]]] = {}
        self._global_snapshots: asyncio.Task[tuple[CraterQueue, FcpSnapshot]] | None = None

    async def execute(self) -> None:
        scanner = self._scanner
        with_subscribed = scanner._include_subscribed and not self._impersonating
        self._progress.phase_start(PHASE_DISCOVER, total=len(scanner._repos) * 2 + int(with_subscribed))
        self._progress.phase_start(PHASE_RESOLVE)
        try:
            async with asyncio.TaskGroup() as work:
                self._global_snapshots = work.create_task(self._load_global_snapshots())
                for repo in scanner._repos:
                    self._repo_snapshots[repo] = work.create_task(self._load_repo_snapshots(repo))

                subscribed = work.create_task(self._collect_subscribed()) if with_subscribed else None

                async with asyncio.TaskGroup() as listings:
                    for repo in scanner._repos:
                        listings.create_task(self._enumerate(work, repo, DiscoveryKind.ASSIGNED))
                        listings.create_task(self._enumerate(work, repo, DiscoveryKind.AUTHORED))

                # Direct discovery wins: subscribed issues are only considered
                # once every authored/assigned listing has been deduplicated.
                if subscribed is not None:
                    for issue in await subscribed:
                        self._dispatch(work, issue, DiscoveryKind.SUBSCRIBED)
                self._progress.phase_done(PHASE_DISCOVER)
        except BaseException as exc:
            self._progress.phase_error(PHASE_RESOLVE, exc)
            raise
        finally:
            self.results.put_nowait(None)
        self._progress.phase_done(PHASE_RESOLVE)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def _enumerate(self, work: asyncio.TaskGroup, repo: RepoRef, kind: DiscoveryKind) -> None:
        username = self._scanner._username
        if kind is DiscoveryKind.AUTHORED:
            issues = self._github.iter_repo_issues(repo, creator=username)
        else:
            issues = self._github.iter_repo_issues(repo, assignee=username)

        try:
            async for issue in issues:
                self._dispatch(work, issue, kind)
        except ReviewQueueError as exc:
            _LOG.error("Abandoning %s listing for %s: %s", kind.value, repo.full_name, exc)
        finally:
            self._progress.item_done(PHASE_DISCOVER)

    async def _collect_subscribed(self) -> list[IssueSnapshot]:
        collected: list[IssueSnapshot] = []
        try:
            async for issue in self._github.iter_subscribed_issues():
                collected.append(issue)
        except ReviewQueueError as exc:
            _LOG.error("Abandoning subscribed listing: %s", exc)
        finally:
            self._progress.item_done(PHASE_DISCOVER)
        return collected

    def _dispatch(self, work: asyncio.TaskGroup, issue: IssueSnapshot, kind: DiscoveryKind) -> None:
        if not issue.is_pull_request:
            return
        key = (issue.repo, issue.number)
        if key in self._seen:
            return
        self._seen.add(key)
        self._progress.item_found(PHASE_RESOLVE)
        work.create_task(self._process(issue, kind))

    # ------------------------------------------------------------------
    # Snapshots shared by every issue of this scan
    # ------------------------------------------------------------------

    async def _load_repo_snapshots(self, repo: RepoRef) -> tuple[BorsQueue, RollupQueue]:
        bors = await self._hub.bors_queue(repo)
        rollups = await self._hub.rollups(repo, self._github)
        return bors, rollups

    async def _load_global_snapshots(self) -> tuple[CraterQueue, FcpSnapshot]:
        crater, fcp = await asyncio.gather(self._hub.crater_queue(), self._hub.fcp_snapshot())
        return crater, fcp

    async def _snapshots_for(self, repo: RepoRef) -> SourceSnapshots:
        assert self._global_snapshots is not None
        crater, fcp = await self._global_snapshots
        repo_task = self._repo_snapshots.get(repo)
        if repo_task is None:
            return SourceSnapshots(crater=crater, fcp=fcp)
        bors, rollups = await repo_task
        return SourceSnapshots(bors=bors, rollups=rollups, crater=crater, fcp=fcp)

    # ------------------------------------------------------------------
    # Per pull request
    # ------------------------------------------------------------------

    async def _process(self, issue: IssueSnapshot, kind: DiscoveryKind) -> None:
        scanner = self._scanner
        try:
            if kind is DiscoveryKind.SUBSCRIBED:
                pull = None
                snapshots = SourceSnapshots()
            else:
                async with scanner._semaphore:
                    pull = await self._github.get_pull(issue.repo, issue.number)
                snapshots = await self._snapshots_for(issue.repo)
        except ReviewQueueError as exc:
            _LOG.error("Dropping %s#%d: %s", issue.repo.full_name, issue.number, exc)
            return
        finally:
            self._progress.item_done(PHASE_RESOLVE)

        pr = resolve_pr(
            issue,
            pull,
            username=scanner._username,
            discovery=kind,
            snapshots=snapshots,
            impersonating=self._impersonating,
        )
        self.results.put_nowait(pr)
