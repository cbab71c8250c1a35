"""Shared, cached access to the auxiliary data sources.

One ``SourceHub`` serves every user of the process. Source failures stop
here: each accessor logs the failure and returns the empty snapshot, so a
broken feed degrades classification instead of failing a scan.
"""

from __future__ import annotations

import logging
import time
from types import TracebackType

import httpx

from reviewqueue.contracts.config import CachePeriods, ReviewQueueConfig
from reviewqueue.contracts.exceptions import ReviewQueueError
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.contracts.sources import BorsQueue, CraterQueue, FcpSnapshot, RollupQueue
from reviewqueue.engine.cache import Cache, Clock, KeyedCache
from reviewqueue.sources._retrying_transport import RetryingTransport
from reviewqueue.sources.bors import fetch_bors_queue
from reviewqueue.sources.crater import fetch_crater_queue
from reviewqueue.sources.rfcbot import fetch_fcp_snapshot
from reviewqueue.sources.rollup import PullFetcher, find_rollups

_LOG = logging.getLogger(__name__)


class SourceHub:
    """Per-source caches for bors, rollups, crater and rfcbot.

    Use as an async context manager; the scraping HTTP client is opened on
    enter and closed on exit.
    """

    def __init__(
        self,
        *,
        crater_url: str,
        rfcbot_url: str,
        periods: CachePeriods | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        periods = periods or CachePeriods()
        self._crater_url = crater_url
        self._rfcbot_url = rfcbot_url
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

        self._bors = KeyedCache(self._produce_bors, key=_repo_key, period=periods.bors, name="bors", clock=clock)
        self._rollups = KeyedCache(
            self._produce_rollups,
            key=lambda param: _repo_key(param[0]),
            period=periods.rollups,
            name="rollups",
            clock=clock,
        )
        self._crater = Cache(self._produce_crater, period=periods.crater, name="crater", clock=clock)
        self._fcp = Cache(self._produce_fcp, period=periods.fcp, name="rfcbot", clock=clock)

    @classmethod
    def from_config(cls, config: ReviewQueueConfig) -> SourceHub:
        return cls(crater_url=config.crater_url, rfcbot_url=config.rfcbot_url, periods=config.cache_periods)

    async def __aenter__(self) -> SourceHub:
        self._open_transport()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _open_transport(self) -> None:
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            transport=RetryingTransport(transport=self._transport),
            headers={"User-Agent": "reviewqueue"},
            timeout=httpx.Timeout(30.0),
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._open_transport()
        assert self._http is not None
        return self._http

    # ------------------------------------------------------------------
    # Accessors (never raise for source failures)
    # ------------------------------------------------------------------

    async def bors_queue(self, repo: RepoRef) -> BorsQueue:
        if repo.bors_queue_url is None:
            return BorsQueue()
        try:
            return await self._bors.get_with_param(repo)
        except ReviewQueueError as exc:
            _LOG.error("bors queue for %s unavailable: %s", repo.full_name, exc)
            return BorsQueue()

    async def rollups(self, repo: RepoRef, github: PullFetcher) -> RollupQueue:
        """Rollups in ``repo``'s bors queue; ``github`` fetches their descriptions."""
        if repo.bors_queue_url is None:
            return RollupQueue()
        try:
            return await self._rollups.get_with_param((repo, github))
        except ReviewQueueError as exc:
            _LOG.error("rollups for %s unavailable: %s", repo.full_name, exc)
            return RollupQueue()

    async def crater_queue(self) -> CraterQueue:
        try:
            return await self._crater.get()
        except ReviewQueueError as exc:
            _LOG.error("crater queue unavailable: %s", exc)
            return CraterQueue()

    async def fcp_snapshot(self) -> FcpSnapshot:
        try:
            return await self._fcp.get()
        except ReviewQueueError as exc:
            _LOG.error("rfcbot snapshot unavailable: %s", exc)
            return FcpSnapshot()

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    async def _produce_bors(self, repo: RepoRef) -> BorsQueue:
        assert repo.bors_queue_url is not None
        return await fetch_bors_queue(self.http, repo.bors_queue_url)

    async def _produce_rollups(self, param: tuple[RepoRef, PullFetcher]) -> RollupQueue:
        repo, github = param
        queue = await self.bors_queue(repo)
        return await find_rollups(github, repo, queue)

    async def _produce_crater(self) -> CraterQueue:
        return await fetch_crater_queue(self.http, self._crater_url)

    async def _produce_fcp(self) -> FcpSnapshot:
        return await fetch_fcp_snapshot(self.http, self._rfcbot_url)


def _repo_key(repo: RepoRef) -> str:
    return repo.full_name
