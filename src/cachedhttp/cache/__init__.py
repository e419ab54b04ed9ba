"""In-memory response caching for cachedhttp.

This package provides the :class:`CacheStore` interface with its
thread-safe :class:`MemoryCacheStore` implementation, the process-wide
default store accessors, and the :mod:`~cachedhttp.cache.policy` rules
deciding what gets cached and what gets invalidated.

The store is consumed by :class:`~cachedhttp.client.sync_client.CachedClient`
and :class:`~cachedhttp.client.async_client.AsyncCachedClient`.
"""

from cachedhttp.cache.store import (
    CacheStore,
    MemoryCacheStore,
    get_default_store,
    reset_default_store,
    set_default_store,
)

__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "get_default_store",
    "reset_default_store",
    "set_default_store",
]
