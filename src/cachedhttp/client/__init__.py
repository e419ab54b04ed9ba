"""Caching HTTP clients for cachedhttp.

Provides blocking and asyncio clients that wrap :mod:`httpx` with an
in-memory GET cache driven by ``Cache-Control: max-age`` and invalidated by
successful mutating requests.

Classes:
    :class:`CachedClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncCachedClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.
    :class:`CancelToken` -- per-request cancellation for :class:`CachedClient`.

Both clients are designed to be used as context managers and accept the
same core parameters: a :class:`~cachedhttp.models.ClientConfig`, an
optional :class:`~cachedhttp.cache.CacheStore`, and an optional ``httpx``
transport.

Example::

    from cachedhttp.client import CachedClient

    with CachedClient(config) as client:
        result = client.get("/users")
"""

from cachedhttp.client.async_client import AsyncCachedClient
from cachedhttp.client.cancellation import CancelToken
from cachedhttp.client.sync_client import CachedClient

__all__ = ["AsyncCachedClient", "CachedClient", "CancelToken"]
