"""cachedhttp -- an in-memory caching layer over httpx.

GET responses are cached in memory for as long as the origin allows through
``Cache-Control: max-age``, unless marked ``private``. Successful POST, PUT
and DELETE requests evict the cached entry for the URL they touched.

Typical usage::

    from cachedhttp import CachedClient, ClientConfig

    with CachedClient(ClientConfig(base_url="https://api.example.com")) as client:
        result = client.get("/users")
        print(result.status_code, result.was_cached)

Modules:
    client: Blocking and asyncio caching clients.
    cache: The cache store and the caching policy.
    models: Pydantic models shared across the package.
    config: Configuration resolution from files, env vars and overrides.
    exceptions: Exception hierarchy with exit-code mapping.
    cli: Typer command line tool for observing the cache.
"""

from cachedhttp.cache import CacheStore, MemoryCacheStore, get_default_store
from cachedhttp.client import AsyncCachedClient, CachedClient, CancelToken
from cachedhttp.models import ClientConfig, Result

__version__ = "0.1.0"

__all__ = [
    "AsyncCachedClient",
    "CacheStore",
    "CachedClient",
    "CancelToken",
    "ClientConfig",
    "MemoryCacheStore",
    "Result",
    "get_default_store",
]
