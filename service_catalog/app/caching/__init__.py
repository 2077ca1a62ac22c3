"""
Catalog caching package.

Cache-aside orchestration over an optional key-value store, plus the key
scheme shared by all request handlers. The store is optional: without one
every lookup goes straight to the upstream provider.
"""

from .cache_aside import CacheAside, fetch_or_populate
from .cache_store import (
    CacheStore,
    CacheStoreError,
    InMemoryCacheStore,
    RedisCacheStore,
    build_cache_store,
)
from .keys import CacheKeyScheme

__all__ = [
    "CacheAside",
    "CacheKeyScheme",
    "CacheStore",
    "CacheStoreError",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "build_cache_store",
    "fetch_or_populate",
]
