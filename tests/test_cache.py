"""Result cache: TTL, stale-while-revalidate, tags and single-flight."""

from __future__ import annotations

import asyncio

import pytest

from app.services.cache import ResultCache, make_cache_key
from app.services.exceptions import CacheProductionError


class CountingProducer:
    def __init__(self, *values, gate: asyncio.Event | None = None) -> None:
        self.values = list(values)
        self.calls = 0
        self.gate = gate

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        value = self.values[min(self.calls, len(self.values)) - 1]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_production():
    cache = ResultCache()
    gate = asyncio.Event()
    producer = CountingProducer({"items": [1, 2, 3]}, gate=gate)

    tasks = [asyncio.create_task(cache.memoize("k", 60, (), producer)) for _ in range(5)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks)

    assert producer.calls == 1
    assert results == [{"items": [1, 2, 3]}] * 5
    assert all(result is results[0] for result in results)


@pytest.mark.asyncio
async def test_different_keys_produce_independently():
    cache = ResultCache()
    slow_gate = asyncio.Event()
    slow = CountingProducer("slow", gate=slow_gate)
    fast = CountingProducer("fast")

    slow_task = asyncio.create_task(cache.memoize("slow", 60, (), slow))
    assert await cache.memoize("fast", 60, (), fast) == "fast"
    assert not slow_task.done()

    slow_gate.set()
    assert await slow_task == "slow"


@pytest.mark.asyncio
async def test_value_is_reused_within_ttl(clock):
    cache = ResultCache(clock=clock)
    producer = CountingProducer("v1", "v2")

    assert await cache.memoize("k", 10, (), producer) == "v1"
    clock.advance(10)
    assert await cache.memoize("k", 10, (), producer) == "v1"
    assert producer.calls == 1


@pytest.mark.asyncio
async def test_expired_entry_is_served_stale_and_refreshed_once(clock):
    cache = ResultCache(clock=clock)
    producer = CountingProducer("v1", "v2")
    await cache.memoize("k", 10, (), producer)

    clock.advance(10.5)
    first = await cache.memoize("k", 10, (), producer)
    second = await cache.memoize("k", 10, (), producer)
    assert first == second == "v1"

    await cache.drain()
    assert producer.calls == 2
    assert await cache.memoize("k", 10, (), producer) == "v2"
    assert producer.calls == 2
    assert cache.stats.refreshes == 1


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_value(clock):
    cache = ResultCache(clock=clock)
    producer = CountingProducer("good", RuntimeError("upstream changed"), "better")
    await cache.memoize("k", 10, (), producer)

    clock.advance(11)
    assert await cache.memoize("k", 10, (), producer) == "good"
    await cache.drain()
    assert cache.stats.refresh_failures == 1
    assert cache.peek("k") == "good"

    assert await cache.memoize("k", 10, (), producer) == "good"
    await cache.drain()
    assert await cache.memoize("k", 10, (), producer) == "better"


@pytest.mark.asyncio
async def test_failed_miss_raises_production_error_and_stores_nothing():
    cache = ResultCache()
    cause = ValueError("boom")
    producer = CountingProducer(cause, "recovered")

    with pytest.raises(CacheProductionError) as excinfo:
        await cache.memoize("k", 10, (), producer)

    assert excinfo.value.cause is cause
    assert "k" not in cache
    assert await cache.memoize("k", 10, (), producer) == "recovered"


@pytest.mark.asyncio
async def test_concurrent_failed_miss_is_shared():
    cache = ResultCache()
    gate = asyncio.Event()
    producer = CountingProducer(RuntimeError("down"), gate=gate)

    tasks = [asyncio.create_task(cache.memoize("k", 10, (), producer)) for _ in range(3)]
    await asyncio.sleep(0)
    gate.set()
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    assert producer.calls == 1
    assert all(isinstance(outcome, CacheProductionError) for outcome in outcomes)


@pytest.mark.asyncio
async def test_invalidate_expires_tagged_entries_only(clock):
    cache = ResultCache(clock=clock)
    tagged_a = CountingProducer("a1", "a2")
    tagged_b = CountingProducer("b1", "b2")
    await cache.memoize("a", 3600, ("hongguo",), tagged_a)
    await cache.memoize("b", 3600, ("search",), tagged_b)

    assert cache.invalidate("hongguo") == 1
    assert cache.invalidate("unknown") == 0

    assert await cache.memoize("a", 3600, ("hongguo",), tagged_a) == "a1"
    assert await cache.memoize("b", 3600, ("search",), tagged_b) == "b1"
    await cache.drain()

    assert await cache.memoize("a", 3600, ("hongguo",), tagged_a) == "a2"
    assert tagged_a.calls == 2
    assert tagged_b.calls == 1


@pytest.mark.asyncio
async def test_invalidate_during_refresh_keeps_landed_value_expired(clock):
    cache = ResultCache(clock=clock)
    gate = asyncio.Event()
    producer = CountingProducer("v1", "fetched-before-invalidate", "v3")
    await cache.memoize("k", 10, ("t",), producer)

    clock.advance(11)
    producer.gate = gate
    assert await cache.memoize("k", 10, ("t",), producer) == "v1"
    await asyncio.sleep(0)
    cache.invalidate("t")
    gate.set()
    await cache.drain()

    producer.gate = None
    assert await cache.memoize("k", 10, ("t",), producer) == "fetched-before-invalidate"
    await cache.drain()
    assert producer.calls == 3
    assert await cache.memoize("k", 10, ("t",), producer) == "v3"


@pytest.mark.asyncio
async def test_invalidate_during_cold_miss_marks_result_expired():
    cache = ResultCache()
    gate = asyncio.Event()
    producer = CountingProducer("old", "new", gate=gate)

    pending = asyncio.create_task(cache.memoize("k", 3600, ("t",), producer))
    await asyncio.sleep(0)
    cache.invalidate("t")
    gate.set()
    assert await pending == "old"

    assert await cache.memoize("k", 3600, ("t",), producer) == "old"
    await cache.drain()
    assert await cache.memoize("k", 3600, ("t",), producer) == "new"


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_shared_production():
    cache = ResultCache()
    gate = asyncio.Event()
    producer = CountingProducer("value", gate=gate)

    first = asyncio.create_task(cache.memoize("k", 10, (), producer))
    second = asyncio.create_task(cache.memoize("k", 10, (), producer))
    await asyncio.sleep(0)
    first.cancel()
    gate.set()

    assert await second == "value"
    assert first.cancelled()
    assert producer.calls == 1


@pytest.mark.asyncio
async def test_least_recently_used_entry_is_evicted():
    cache = ResultCache(max_entries=2)
    await cache.memoize("k1", 60, ("t",), CountingProducer(1))
    await cache.memoize("k2", 60, ("t",), CountingProducer(2))
    await cache.memoize("k1", 60, ("t",), CountingProducer(10))
    await cache.memoize("k3", 60, ("t",), CountingProducer(3))

    assert "k1" in cache
    assert "k2" not in cache
    assert "k3" in cache
    assert len(cache) == 2
    assert cache.invalidate("t") == 2


def test_cache_key_is_deterministic_and_argument_sensitive():
    key = make_cache_key("search", "src1", "https://a.example/api", "三体", 1)
    assert key == make_cache_key("search", "src1", "https://a.example/api", "三体", 1)
    assert key != make_cache_key("search", "src1", "https://a.example/api", "三体", 2)
    assert key != make_cache_key("search", "src2", "https://a.example/api", "三体", 1)
    assert key.startswith("search:")
