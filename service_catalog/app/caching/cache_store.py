"""
Cache store adapters.

A store is a thin capability over a key-value service: ``get`` returns raw
bytes (or None) and ``set`` writes bytes with a TTL. Transport failures are
raised as :class:`CacheStoreError` so the cache-aside layer can tell "cache
unavailable" apart from a failing producer.
"""

from __future__ import annotations

import time
from typing import Dict, Optional, Protocol, Tuple, runtime_checkable

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.config import BaseConfig
from shared.logging import get_logger


class CacheStoreError(Exception):
    """The cache store could not be reached or refused the operation."""

    def __init__(self, operation: str, key: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(f"cache {operation} failed for {key!r}: {cause}")


@runtime_checkable
class CacheStore(Protocol):
    """Key-value capability consumed by the cache-aside orchestrator."""

    async def get(self, key: str) -> Optional[bytes]:
        ...

    async def set(self, key: str, payload: bytes, ttl_seconds: int) -> bool:
        ...


def _check_ttl(ttl_seconds: int) -> None:
    if ttl_seconds <= 0:
        raise ValueError("ttl_seconds must be a positive integer")


class RedisCacheStore:
    """Redis-backed cache store."""

    def __init__(
        self,
        host: str,
        port: int = 6379,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        db: int = 0,
        client: Optional[redis.Redis] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.logger = get_logger("catalog.cache_store")
        self._redis = client or redis.Redis(
            host=host,
            port=port,
            db=db,
            username=username,
            password=password,
        )

    @classmethod
    def from_config(cls, config: BaseConfig) -> "RedisCacheStore":
        return cls(
            config.redis_host,
            config.redis_port,
            username=config.redis_username,
            password=config.redis_password,
            db=config.redis_db,
        )

    async def get(self, key: str) -> Optional[bytes]:
        try:
            value = await self._redis.get(key)
        except (RedisError, OSError) as exc:
            raise CacheStoreError("get", key, exc) from exc

        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    async def set(self, key: str, payload: bytes, ttl_seconds: int) -> bool:
        _check_ttl(ttl_seconds)
        try:
            result = await self._redis.set(key, payload, ex=ttl_seconds)
        except (RedisError, OSError) as exc:
            raise CacheStoreError("set", key, exc) from exc
        return bool(result)

    async def ping(self) -> bool:
        """Return True when Redis responds to a ping."""
        try:
            return bool(await self._redis.ping())
        except (RedisError, OSError) as exc:
            self.logger.error("Redis health check failed", error=str(exc))
            return False

    async def close(self) -> None:
        """Close Redis connections."""
        await self._redis.aclose()


class InMemoryCacheStore:
    """Process-local store with TTL expiry.

    Useful for tests and single-process deployments without Redis.
    """

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        # key -> (expires_at, payload)
        self._entries: Dict[str, Tuple[float, bytes]] = {}

    async def get(self, key: str) -> Optional[bytes]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return payload

    async def set(self, key: str, payload: bytes, ttl_seconds: int) -> bool:
        _check_ttl(ttl_seconds)
        self._entries[key] = (self._clock() + ttl_seconds, bytes(payload))
        return True

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def build_cache_store(config: BaseConfig) -> Optional[CacheStore]:
    """Build the configured store, or None when caching is disabled."""
    if not config.cache_enabled:
        return None
    if config.cache_backend == "memory":
        return InMemoryCacheStore()
    return RedisCacheStore.from_config(config)
