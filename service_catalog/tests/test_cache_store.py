"""
Tests for the cache store adapters.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from service_catalog.app.caching import (
    CacheStore,
    CacheStoreError,
    InMemoryCacheStore,
    RedisCacheStore,
    build_cache_store,
)
from shared.config import get_config


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


class TestRedisCacheStore:
    """Test cases for RedisCacheStore."""

    @pytest.mark.asyncio
    async def test_set_passes_ttl_as_expiry(self, redis_client):
        store = RedisCacheStore("redis.local", client=redis_client)

        assert await store.set("flixhq:info:x", b"{}", 10800) is True
        redis_client.set.assert_awaited_once_with("flixhq:info:x", b"{}", ex=10800)

    @pytest.mark.asyncio
    async def test_get_returns_bytes(self, redis_client):
        redis_client.get.return_value = '{"a": 1}'
        store = RedisCacheStore("redis.local", client=redis_client)

        assert await store.get("k") == b'{"a": 1}'

    @pytest.mark.asyncio
    async def test_get_absent_key(self, redis_client):
        store = RedisCacheStore("redis.local", client=redis_client)

        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_connection_errors_are_wrapped(self, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")
        redis_client.set.side_effect = RedisConnectionError("refused")
        store = RedisCacheStore("redis.local", client=redis_client)

        with pytest.raises(CacheStoreError) as excinfo:
            await store.get("k")
        assert excinfo.value.operation == "get"

        with pytest.raises(CacheStoreError) as excinfo:
            await store.set("k", b"v", 60)
        assert excinfo.value.operation == "set"

    @pytest.mark.asyncio
    async def test_invalid_ttl_rejected_before_io(self, redis_client):
        store = RedisCacheStore("redis.local", client=redis_client)

        with pytest.raises(ValueError):
            await store.set("k", b"v", 0)
        redis_client.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ping_failure_reports_false(self, redis_client):
        redis_client.ping.side_effect = RedisConnectionError("refused")
        store = RedisCacheStore("redis.local", client=redis_client)

        assert await store.ping() is False

    @pytest.mark.asyncio
    async def test_close(self, redis_client):
        store = RedisCacheStore("redis.local", client=redis_client)

        await store.close()
        redis_client.aclose.assert_awaited_once()

    def test_satisfies_protocol(self, redis_client):
        assert isinstance(RedisCacheStore("redis.local", client=redis_client), CacheStore)


class TestInMemoryCacheStore:
    """Test cases for InMemoryCacheStore."""

    @pytest.mark.asyncio
    async def test_entries_expire_after_ttl(self):
        clock = FakeClock()
        store = InMemoryCacheStore(clock=clock)

        await store.set("k", b"v", 30)
        clock.now += 29
        assert await store.get("k") == b"v"

        clock.now += 1
        assert await store.get("k") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_overwrite_replaces_value(self):
        store = InMemoryCacheStore()

        await store.set("k", b"one", 60)
        await store.set("k", b"two", 60)

        assert await store.get("k") == b"two"

    @pytest.mark.asyncio
    async def test_invalid_ttl_rejected(self):
        with pytest.raises(ValueError):
            await InMemoryCacheStore().set("k", b"v", -1)


class TestBuildCacheStore:
    def test_no_redis_host_disables_cache(self):
        config = get_config("catalog", redis_host=None, cache_backend="redis")

        assert build_cache_store(config) is None
        assert config.cache_enabled is False

    def test_memory_backend(self):
        config = get_config("catalog", cache_backend="memory")

        assert isinstance(build_cache_store(config), InMemoryCacheStore)

    def test_memory_backend_ignores_redis_host(self):
        config = get_config("catalog", cache_backend="memory", redis_host=None)

        assert config.cache_enabled is True
        assert isinstance(build_cache_store(config), InMemoryCacheStore)

    def test_redis_backend(self):
        config = get_config("catalog", redis_host="redis.local", redis_port=6380, cache_backend="redis")

        store = build_cache_store(config)

        assert isinstance(store, RedisCacheStore)
        assert store.host == "redis.local"
        assert store.port == 6380
