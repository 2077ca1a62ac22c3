"""
Unit tests for the cache-aside orchestrator.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from service_catalog.app.caching import (
    CacheAside,
    CacheStoreError,
    InMemoryCacheStore,
    fetch_or_populate,
)


class CountingProducer:
    """Async producer that records how often it was awaited."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.value


class DummyMetrics:
    """Minimal metrics collector stub."""

    def __init__(self):
        self.lookups = []
        self.store_errors = []

    def record_cache_lookup(self, resource: str, result: str):
        self.lookups.append((resource, result))

    def record_cache_store_error(self, operation: str):
        self.store_errors.append(operation)


def _store_stub(get_value=None):
    store = AsyncMock()
    store.get = AsyncMock(return_value=get_value)
    store.set = AsyncMock(return_value=True)
    return store


class TestCacheAside:
    """Test cases for CacheAside."""

    @pytest.mark.asyncio
    async def test_disabled_cache_calls_producer_every_time(self):
        metrics = DummyMetrics()
        cache = CacheAside(None, metrics=metrics)
        producer = CountingProducer({"id": "x"})

        first = await cache.fetch_or_populate("flixhq:info:x", 60, producer, resource="info")
        second = await cache.fetch_or_populate("flixhq:info:x", 60, producer, resource="info")

        assert first == second == {"id": "x"}
        assert producer.calls == 2
        assert metrics.lookups == [("info", "bypass"), ("info", "bypass")]
        assert cache.enabled is False

    @pytest.mark.asyncio
    async def test_hit_short_circuits_producer(self):
        store = _store_stub(get_value=json.dumps({"id": "cached"}).encode())
        cache = CacheAside(store)
        producer = CountingProducer({"id": "fresh"})

        result = await cache.fetch_or_populate("k", 60, producer)

        assert result == {"id": "cached"}
        assert producer.calls == 0
        store.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_miss_populates_with_ttl_passed_through(self):
        store = InMemoryCacheStore()
        cache = CacheAside(store)
        producer = CountingProducer([{"id": "a", "title": "Été"}])

        result = await cache.fetch_or_populate("flixhq:trending:tv", 10800, producer)

        assert result == [{"id": "a", "title": "Été"}]
        assert producer.calls == 1
        assert json.loads(await store.get("flixhq:trending:tv")) == result

        again = await cache.fetch_or_populate("flixhq:trending:tv", 10800, producer)
        assert again == result
        assert producer.calls == 1

    @pytest.mark.asyncio
    async def test_miss_writes_serialized_value_with_ttl(self):
        store = _store_stub()
        cache = CacheAside(store)

        await cache.fetch_or_populate("k", 1800, CountingProducer({"url": "u"}))

        store.set.assert_awaited_once_with("k", b'{"url": "u"}', 1800)

    @pytest.mark.asyncio
    async def test_non_positive_ttl_rejected(self):
        cache = CacheAside(InMemoryCacheStore())
        producer = CountingProducer(1)

        with pytest.raises(ValueError):
            await cache.fetch_or_populate("k", 0, producer)
        assert producer.calls == 0

    @pytest.mark.asyncio
    async def test_corrupt_payload_treated_as_miss(self):
        store = _store_stub(get_value=b"{not json")
        cache = CacheAside(store)
        producer = CountingProducer({"ok": True})

        result = await cache.fetch_or_populate("k", 60, producer)

        assert result == {"ok": True}
        assert producer.calls == 1
        store.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_read_failure_degrades_to_miss(self):
        metrics = DummyMetrics()
        store = _store_stub()
        store.get.side_effect = CacheStoreError("get", "k", ConnectionError("down"))
        cache = CacheAside(store, metrics=metrics)

        result = await cache.fetch_or_populate("k", 60, CountingProducer("value"), resource="info")

        assert result == "value"
        assert ("info", "miss") in metrics.lookups
        assert metrics.store_errors == ["get"]

    @pytest.mark.asyncio
    async def test_write_failure_still_returns_value(self):
        metrics = DummyMetrics()
        store = _store_stub()
        store.set.side_effect = CacheStoreError("set", "k", ConnectionError("down"))
        cache = CacheAside(store, metrics=metrics)

        result = await cache.fetch_or_populate("k", 60, CountingProducer([1, 2]))

        assert result == [1, 2]
        assert metrics.store_errors == ["set"]

    @pytest.mark.asyncio
    async def test_rejected_write_is_recorded(self):
        metrics = DummyMetrics()
        store = _store_stub()
        store.set.return_value = False
        cache = CacheAside(store, metrics=metrics)

        assert await cache.fetch_or_populate("k", 60, CountingProducer("v")) == "v"
        assert metrics.store_errors == ["set"]

    @pytest.mark.asyncio
    async def test_producer_failure_propagates_and_writes_nothing(self):
        store = _store_stub()
        cache = CacheAside(store)

        async def failing():
            raise RuntimeError("upstream down")

        with pytest.raises(RuntimeError, match="upstream down"):
            await cache.fetch_or_populate("k", 60, failing)
        store.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_producer_timeout(self):
        cache = CacheAside(InMemoryCacheStore(), producer_timeout=0.01)

        async def hanging():
            await asyncio.sleep(1)

        with pytest.raises(asyncio.TimeoutError):
            await cache.fetch_or_populate("k", 60, hanging)

    @pytest.mark.asyncio
    async def test_concurrent_misses_each_call_producer_by_default(self):
        cache = CacheAside(InMemoryCacheStore())
        started = asyncio.Event()
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            await started.wait()
            return "v"

        tasks = [asyncio.ensure_future(cache.fetch_or_populate("k", 60, slow)) for _ in range(3)]
        await asyncio.sleep(0)
        started.set()
        results = await asyncio.gather(*tasks)

        assert results == ["v", "v", "v"]
        assert calls == 3

    @pytest.mark.asyncio
    async def test_coalesced_misses_share_one_producer_call(self):
        cache = CacheAside(InMemoryCacheStore(), coalesce_misses=True)
        release = asyncio.Event()
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            await release.wait()
            return {"shared": True}

        tasks = [asyncio.ensure_future(cache.fetch_or_populate("k", 60, slow)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert results == [{"shared": True}] * 3
        assert calls == 1
        assert cache._inflight == {}

    @pytest.mark.asyncio
    async def test_coalesced_failure_reaches_every_waiter(self):
        cache = CacheAside(InMemoryCacheStore(), coalesce_misses=True)
        release = asyncio.Event()

        async def failing():
            await release.wait()
            raise RuntimeError("boom")

        tasks = [asyncio.ensure_future(cache.fetch_or_populate("k", 60, failing)) for _ in range(2)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(result, RuntimeError) for result in results)


@pytest.mark.asyncio
async def test_module_level_helper_without_store():
    producer = CountingProducer({"a": 1})

    assert await fetch_or_populate(None, "k", 60, producer) == {"a": 1}
    assert producer.calls == 1
