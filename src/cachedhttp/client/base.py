"""Cache glue shared by the blocking and asyncio caching clients.

:class:`BaseCachingClient` owns everything that does not depend on how the
transport is awaited: request construction, cache key derivation, the
lookup / store / invalidate steps with their fail-open error handling, and
the optional mapping of 4xx/5xx responses to typed exceptions. The
subclasses add the context-manager lifecycle and the transport call.

Store failures never fail a request. A lookup that raises is logged and
treated as a miss; a store or invalidation that raises is logged and the
response is returned as usual.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Union

import httpx

from cachedhttp.cache import policy
from cachedhttp.cache.store import CacheStore, get_default_store
from cachedhttp.exceptions import InvalidUsageError, error_for_status
from cachedhttp.models import ClientConfig, Result

logger = logging.getLogger(__name__)

HTTPClient = Union[httpx.Client, httpx.AsyncClient]


class BaseCachingClient:
    """State and cache policy glue common to both caching clients.

    Args:
        config: Request settings. Defaults to ``ClientConfig()``.
        cache: Store to read and write. ``None`` selects the process-wide
            store from :func:`~cachedhttp.cache.store.get_default_store`.
        clock: Callable returning the current POSIX time, used to turn
            ``max-age`` into an absolute expiry. Must match the store's clock.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        cache: Optional[CacheStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or ClientConfig()
        self._store = cache if cache is not None else get_default_store()
        self._clock = clock
        self._client: Optional[HTTPClient] = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def cache(self) -> CacheStore:
        """The store this client reads from and writes to."""
        return self._store

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def invalidate(self, uri: str, params: Optional[dict[str, Any]] = None) -> None:
        """Evict the cached GET response for *uri*, if any."""
        request = self._build_request("GET", uri, params=params)
        self._cache_invalidate(policy.cache_key(request))

    # ------------------------------------------------------------------ #
    # Request construction
    # ------------------------------------------------------------------ #

    def _require_client(self) -> HTTPClient:
        if self._client is None:
            raise InvalidUsageError("Client not opened -- use as context manager or call open()")
        return self._client

    def _client_kwargs(self) -> dict[str, Any]:
        config = self._config
        return {
            "base_url": config.base_url,
            "timeout": config.timeout,
            "verify": config.verify_ssl,
            "follow_redirects": config.follow_redirects,
            "headers": config.headers,
        }

    def _build_request(
        self,
        method: str,
        uri: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        content: Optional[Union[str, bytes]] = None,
        json: Optional[Any] = None,
        data: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Request:
        """Build the :class:`httpx.Request` whose URL doubles as the cache key."""
        client = self._require_client()

        kwargs: dict[str, Any] = {"params": params, "headers": headers}
        if data is not None:
            kwargs["data"] = data
        elif json is not None:
            kwargs["json"] = json
        elif content is not None:
            kwargs["content"] = content
        # Leaving timeout out keeps the client default; None would disable it.
        if timeout is not None:
            kwargs["timeout"] = timeout

        return client.build_request(method, uri, **kwargs)

    # ------------------------------------------------------------------ #
    # Cache steps
    # ------------------------------------------------------------------ #

    def _cache_lookup(self, key: str) -> Optional[str]:
        """Return the cached body for *key*, or ``None`` to go to the transport."""
        try:
            if not self._store.contains(key):
                logger.debug("Cache miss: %s", key)
                return None
            value = self._store.get(key)
        except Exception:
            logger.warning("Cache lookup failed for %s, fetching instead", key, exc_info=True)
            return None

        if value is None:
            # Entry expired or was removed between contains() and get().
            logger.debug("Cache entry vanished during lookup: %s", key)
            return None
        logger.debug("Cache hit: %s", key)
        return value

    def _cached_result(self, body: str) -> Result:
        return Result(body=body, status_code=policy.CACHEABLE_STATUS, was_cached=True)

    def _cache_response(self, key: str, response: httpx.Response) -> None:
        """Store *response* under *key* if the cache policy allows it."""
        cache_control = policy.parse_cache_control(response.headers)
        if cache_control is None or not policy.is_cacheable(response.status_code, cache_control):
            return
        expiry = policy.expires_at(cache_control, self._clock())
        try:
            self._store.set(key, response.text, expiry)
        except Exception:
            logger.warning("Cache store failed for %s", key, exc_info=True)
            return
        logger.debug("Cached %s for %ss", key, cache_control.max_age)

    def _invalidate_if_successful(self, key: str, response: httpx.Response) -> None:
        if policy.invalidates(response.status_code):
            self._cache_invalidate(key)

    def _cache_invalidate(self, key: str) -> None:
        try:
            self._store.remove(key)
        except Exception:
            logger.warning("Cache invalidation failed for %s", key, exc_info=True)
            return
        logger.debug("Invalidated %s", key)

    # ------------------------------------------------------------------ #
    # Response handling
    # ------------------------------------------------------------------ #

    def _live_result(self, response: httpx.Response) -> Result:
        return Result(body=response.text, status_code=response.status_code, was_cached=False)

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for 4xx/5xx when ``raise_for_status`` is set."""
        status = response.status_code
        if not self._config.raise_for_status or status < 400:
            return

        # Try to extract an error message from the response body.
        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        raise error_for_status(status, f"{prefix}: {msg}" if msg else prefix)
