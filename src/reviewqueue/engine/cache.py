"""Time-windowed memoizing caches around async producers.

Each cache slot owns an ``asyncio.Lock``. A refresh runs while the lock is
held, so concurrent callers of an expired slot queue behind one producer call
and then read its result. Distinct slots never share a lock.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

from reviewqueue.contracts.exceptions import ReviewQueueError

_LOG = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
P = TypeVar("P")

Clock = Callable[[], float]


class Cache(Generic[T]):
    """Caches the result of a zero-argument async producer for ``period`` seconds.

    When a refresh fails and an older value exists, the older value is served
    and the slot's timestamp is bumped, so the next attempt waits a full
    period. Without an older value the error propagates.
    """

    def __init__(
        self,
        producer: Callable[[], Awaitable[T]],
        *,
        period: float,
        name: str = "cache",
        clock: Clock = time.monotonic,
    ) -> None:
        self._producer = producer
        self._period = period
        self._name = name
        self._clock = clock
        self._lock = asyncio.Lock()
        self._value: T | None = None
        self._has_value = False
        self._fetched_at = 0.0

    @property
    def has_value(self) -> bool:
        return self._has_value

    def _is_fresh(self) -> bool:
        return self._has_value and self._clock() - self._fetched_at <= self._period

    async def get(self) -> T:
        if self._is_fresh():
            return self._value  # type: ignore[return-value]

        async with self._lock:
            # Another caller may have refreshed while we waited for the lock.
            if self._is_fresh():
                return self._value  # type: ignore[return-value]

            try:
                value = await self._producer()
            except ReviewQueueError as exc:
                if not self._has_value:
                    raise
                _LOG.error("%s refresh failed, serving stale value: %s", self._name, exc)
                self._fetched_at = self._clock()
                return self._value  # type: ignore[return-value]

            self._value = value
            self._has_value = True
            self._fetched_at = self._clock()
            return value


class KeyedCache(Generic[K, P, T]):
    """A family of :class:`Cache` slots for a single-parameter producer.

    ``key`` maps a parameter to the slot it belongs to. Parameters that share a
    key share a slot, and the slot refreshes with the most recent parameter.
    """

    def __init__(
        self,
        producer: Callable[[P], Awaitable[T]],
        *,
        key: Callable[[P], K],
        period: float,
        name: str = "cache",
        clock: Clock = time.monotonic,
    ) -> None:
        self._producer = producer
        self._key = key
        self._period = period
        self._name = name
        self._clock = clock
        self._slots: dict[K, Cache[T]] = {}
        self._params: dict[K, P] = {}

    def _slot(self, key: K) -> Cache[T]:
        slot = self._slots.get(key)
        if slot is None:

            async def produce() -> T:
                return await self._producer(self._params[key])

            slot = Cache(produce, period=self._period, name=f"{self._name}[{key}]", clock=self._clock)
            self._slots[key] = slot
        return slot

    async def get_with_param(self, param: P) -> T:
        key = self._key(param)
        self._params[key] = param
        return await self._slot(key).get()

    def __len__(self) -> int:
        return len(self._slots)
