"""SDK composition root for reviewqueue."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from types import TracebackType

from reviewqueue.auth import create_token_resolver
from reviewqueue.contracts.config import ReviewQueueConfig
from reviewqueue.contracts.pr import BackendStatus, Pr, ScanResult
from reviewqueue.engine.progress import ScanProgress
from reviewqueue.engine.results import UserResultCache
from reviewqueue.engine.scanner import IssueSource, Scanner, SnapshotSource
from reviewqueue.persistence.seen import SeenLedger
from reviewqueue.sources.github import GitHubClient
from reviewqueue.sources.hub import SourceHub


class ReviewQueue:
    """reviewqueue SDK public API.

    Wires one GitHub client, one shared ``SourceHub`` and the per-user result
    cache. Use as an async context manager so the HTTP clients are opened and
    closed::

        async with await ReviewQueue.from_config(config) as queue:
            result = await queue.get()
    """

    def __init__(
        self,
        *,
        config: ReviewQueueConfig,
        github: IssueSource,
        hub: SnapshotSource,
        ledger: SeenLedger | None = None,
        progress: ScanProgress | None = None,
    ) -> None:
        self._config = config
        self._github = github
        self._hub = hub
        self._ledger = ledger
        self._progress = progress
        self._semaphore = asyncio.Semaphore(config.max_concurrent)
        self._stack = AsyncExitStack()
        self._results = UserResultCache(self.scan, on_complete=ledger.record if ledger is not None else None)

    @classmethod
    async def from_config(cls, config: ReviewQueueConfig, *, progress: ScanProgress | None = None) -> ReviewQueue:
        token = await create_token_resolver(config).resolve()
        github = GitHubClient(token=token, base_url=config.github_api_url, pagination=config.pagination)
        hub = SourceHub.from_config(config)
        ledger = SeenLedger(config.ledger_path) if config.ledger_path is not None else None
        return cls(config=config, github=github, hub=hub, ledger=ledger, progress=progress)

    async def __aenter__(self) -> ReviewQueue:
        for resource in (self._github, self._hub):
            if isinstance(resource, AbstractAsyncContextManager):
                await self._stack.enter_async_context(resource)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._stack.aclose()

    @property
    def config(self) -> ReviewQueueConfig:
        return self._config

    @property
    def ledger(self) -> SeenLedger | None:
        return self._ledger

    def scanner(self, username: str | None = None) -> Scanner:
        return Scanner(
            github=self._github,
            hub=self._hub,
            repos=self._config.repo_refs(),
            username=username or self._config.username,
            include_subscribed=self._config.include_subscribed,
            semaphore=self._semaphore,
            progress=self._progress,
        )

    def scan(self, username: str | None = None) -> AsyncIterator[Pr]:
        """Start a fresh, uncached scan. ``username`` defaults to the configured user."""
        return self.scanner(username).scan()

    async def get(self, username: str | None = None) -> ScanResult:
        return await self._results.get(username or self._config.username)

    async def get_and_refresh(self, username: str | None = None) -> ScanResult:
        return await self._results.get_and_refresh(username or self._config.username)

    def refresh(self, username: str | None = None) -> asyncio.Task[ScanResult | None]:
        return self._results.refresh(username or self._config.username)

    def status(self, username: str | None = None) -> BackendStatus:
        return self._results.status(username or self._config.username)
