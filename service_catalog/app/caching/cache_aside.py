"""
Cache-aside orchestration.

Given a key, a TTL and a producer (an upstream call), return the cached
value when present and decodable, otherwise call the producer and populate
the cache with its result. Caching is best effort: store failures degrade to
"miss" on read and "skip population" on write, while producer failures
always propagate unchanged.

Without miss coalescing, concurrent misses for one key each call the
producer and each write the store (last write wins).
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING, TypeVar

from shared.logging import get_logger

from .cache_store import CacheStore, CacheStoreError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


T = TypeVar("T")
Producer = Callable[[], Awaitable[T]]

_MISS = object()


class CacheAside:
    """Cache-aside orchestrator bound to an optional store."""

    def __init__(
        self,
        store: Optional[CacheStore],
        *,
        metrics: Optional["MetricsCollector"] = None,
        producer_timeout: Optional[float] = None,
        coalesce_misses: bool = False,
    ) -> None:
        self.store = store
        self.metrics = metrics
        self.producer_timeout = producer_timeout
        self.coalesce_misses = coalesce_misses
        self.logger = get_logger("catalog.cache_aside")
        self._inflight: Dict[str, "asyncio.Task[Any]"] = {}

    @property
    def enabled(self) -> bool:
        return self.store is not None

    async def fetch_or_populate(
        self,
        key: str,
        ttl_seconds: int,
        producer: Producer,
        *,
        resource: str = "unknown",
    ) -> Any:
        """Return the cached value for ``key`` or produce and cache it."""
        if self.store is None:
            self._record_lookup(resource, "bypass")
            return await self._produce(producer)

        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be a positive integer")

        cached = await self._read(key)
        if cached is not _MISS:
            self._record_lookup(resource, "hit")
            self.logger.debug("Cache hit", key=key)
            return cached

        self._record_lookup(resource, "miss")
        self.logger.debug("Cache miss", key=key)

        if not self.coalesce_misses:
            return await self._populate(key, ttl_seconds, producer)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._populate(key, ttl_seconds, producer))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        return await asyncio.shield(task)

    async def _read(self, key: str) -> Any:
        try:
            raw = await self.store.get(key)
        except CacheStoreError as exc:
            self._record_store_error("get")
            self.logger.warning("Cache read failed, treating as miss", key=key, error=str(exc))
            return _MISS

        if not raw:
            return _MISS

        try:
            return json.loads(raw)
        except ValueError:
            self.logger.warning("Discarding malformed cache payload", key=key)
            return _MISS

    async def _populate(self, key: str, ttl_seconds: int, producer: Producer) -> Any:
        value = await self._produce(producer)

        try:
            payload = json.dumps(value, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            self.logger.warning("Producer result is not cacheable", key=key, error=str(exc))
            return value

        try:
            stored = await self.store.set(key, payload, ttl_seconds)
        except CacheStoreError as exc:
            self._record_store_error("set")
            self.logger.warning("Cache write failed, serving uncached", key=key, error=str(exc))
            return value

        if not stored:
            self._record_store_error("set")
            self.logger.warning("Cache write rejected, serving uncached", key=key)
        else:
            self.logger.debug("Cached value", key=key, ttl=ttl_seconds)
        return value

    async def _produce(self, producer: Producer) -> Any:
        if self.producer_timeout is None:
            return await producer()
        return await asyncio.wait_for(producer(), timeout=self.producer_timeout)

    def _forget(self, key: str, task: "asyncio.Task[Any]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    def _record_lookup(self, resource: str, result: str) -> None:
        if self.metrics:
            self.metrics.record_cache_lookup(resource, result)

    def _record_store_error(self, operation: str) -> None:
        if self.metrics:
            self.metrics.record_cache_store_error(operation)


async def fetch_or_populate(
    store: Optional[CacheStore],
    key: str,
    ttl_seconds: int,
    producer: Producer,
) -> Any:
    """One-shot cache-aside lookup without metrics or coalescing."""
    return await CacheAside(store).fetch_or_populate(key, ttl_seconds, producer)
