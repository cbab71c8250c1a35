from __future__ import annotations

import asyncio

import pytest

from reviewqueue.contracts.exceptions import SourceError
from reviewqueue.engine.cache import Cache, KeyedCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _Producer:
    """Counts calls; each call can be held open until ``release`` is set."""

    def __init__(self) -> None:
        self.calls: list[object] = []
        self.release = asyncio.Event()
        self.release.set()
        self.error: Exception | None = None

    async def __call__(self, param: object = None) -> str:
        self.calls.append(param)
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return f"value-{len(self.calls)}"


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class TestCache:
    @pytest.mark.asyncio
    async def test_first_get_produces_and_caches(self) -> None:
        producer, clock = _Producer(), _Clock()
        cache: Cache[str] = Cache(producer, period=30, clock=clock)

        assert not cache.has_value
        assert await cache.get() == "value-1"
        assert await cache.get() == "value-1"
        assert cache.has_value
        assert len(producer.calls) == 1

    @pytest.mark.asyncio
    async def test_expired_value_is_refreshed(self) -> None:
        producer, clock = _Producer(), _Clock()
        cache: Cache[str] = Cache(producer, period=30, clock=clock)

        await cache.get()
        clock.now = 30
        assert await cache.get() == "value-1"
        clock.now = 30.5
        assert await cache.get() == "value-2"

    @pytest.mark.asyncio
    async def test_concurrent_gets_coalesce_into_one_call(self) -> None:
        producer, clock = _Producer(), _Clock()
        producer.release.clear()
        cache: Cache[str] = Cache(producer, period=30, clock=clock)

        readers = [asyncio.create_task(cache.get()) for _ in range(25)]
        await asyncio.sleep(0)
        producer.release.set()
        values = await asyncio.gather(*readers)

        assert values == ["value-1"] * 25
        assert len(producer.calls) == 1

    @pytest.mark.asyncio
    async def test_concurrent_gets_on_expired_slot_coalesce(self) -> None:
        producer, clock = _Producer(), _Clock()
        cache: Cache[str] = Cache(producer, period=30, clock=clock)
        await cache.get()

        clock.now = 100
        producer.release.clear()
        readers = [asyncio.create_task(cache.get()) for _ in range(10)]
        await asyncio.sleep(0)
        producer.release.set()
        values = await asyncio.gather(*readers)

        assert values == ["value-2"] * 10
        assert len(producer.calls) == 2

    @pytest.mark.asyncio
    async def test_first_failure_propagates(self) -> None:
        producer, clock = _Producer(), _Clock()
        producer.error = SourceError("down", source="crater")
        cache: Cache[str] = Cache(producer, period=30, clock=clock)

        with pytest.raises(SourceError):
            await cache.get()
        assert not cache.has_value

    @pytest.mark.asyncio
    async def test_failed_refresh_serves_stale_value_for_a_period(self) -> None:
        producer, clock = _Producer(), _Clock()
        cache: Cache[str] = Cache(producer, period=30, clock=clock)
        await cache.get()

        producer.error = SourceError("down", source="crater")
        clock.now = 31
        assert await cache.get() == "value-1"
        clock.now = 40
        assert await cache.get() == "value-1"
        assert len(producer.calls) == 2

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_not_swallowed(self) -> None:
        producer, clock = _Producer(), _Clock()
        cache: Cache[str] = Cache(producer, period=30, clock=clock)
        await cache.get()

        producer.error = RuntimeError("bug")
        clock.now = 31
        with pytest.raises(RuntimeError):
            await cache.get()


# ---------------------------------------------------------------------------
# KeyedCache
# ---------------------------------------------------------------------------


class TestKeyedCache:
    @pytest.mark.asyncio
    async def test_slots_are_independent(self) -> None:
        producer, clock = _Producer(), _Clock()
        cache: KeyedCache[str, str, str] = KeyedCache(producer, key=lambda param: param, period=30, clock=clock)

        await cache.get_with_param("rust")
        await cache.get_with_param("cargo")
        await cache.get_with_param("rust")

        assert producer.calls == ["rust", "cargo"]
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_slow_slot_does_not_block_others(self) -> None:
        clock = _Clock()
        gate = asyncio.Event()

        async def producer(param: str) -> str:
            if param == "slow":
                await gate.wait()
            return param

        cache: KeyedCache[str, str, str] = KeyedCache(producer, key=lambda param: param, period=30, clock=clock)

        slow = asyncio.create_task(cache.get_with_param("slow"))
        await asyncio.sleep(0)
        assert await asyncio.wait_for(cache.get_with_param("fast"), timeout=1) == "fast"
        gate.set()
        assert await slow == "slow"

    @pytest.mark.asyncio
    async def test_slot_refreshes_with_latest_param(self) -> None:
        producer, clock = _Producer(), _Clock()
        cache: KeyedCache[str, tuple[str, int], str] = KeyedCache(
            producer, key=lambda param: param[0], period=30, clock=clock
        )

        await cache.get_with_param(("rust", 1))
        clock.now = 31
        await cache.get_with_param(("rust", 2))

        assert producer.calls == [("rust", 1), ("rust", 2)]
        assert len(cache) == 1
