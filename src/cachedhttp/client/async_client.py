"""Asyncio caching client -- mirrors :class:`~cachedhttp.client.sync_client.CachedClient` API.

This module provides :class:`AsyncCachedClient`, the non-blocking
counterpart to :class:`~cachedhttp.client.sync_client.CachedClient`. It
wraps :class:`httpx.AsyncClient` and applies the same cache policy through
the shared :class:`~cachedhttp.client.base.BaseCachingClient` glue. Cache
store calls are synchronous and in-memory, so the transport call is the
only suspension point.

Cancellation follows asyncio conventions: cancelling the task awaiting a
request propagates :class:`asyncio.CancelledError` as usual, while
:meth:`AsyncCachedClient.cancel_pending_requests` aborts every in-flight
transport call and surfaces as
:class:`~cachedhttp.exceptions.RequestCancelledError` in the awaiting
tasks. Neither path writes to or evicts from the cache.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Optional, Union

import httpx

from cachedhttp.cache import policy
from cachedhttp.cache.store import CacheStore
from cachedhttp.client.base import BaseCachingClient
from cachedhttp.exceptions import RequestCancelledError, RequestTimeoutError, TransportError
from cachedhttp.models import ClientConfig, Result


class AsyncCachedClient(BaseCachingClient):
    """Asyncio HTTP client that caches GET responses in memory.

    Provides the same behaviour as
    :class:`~cachedhttp.client.sync_client.CachedClient` but awaits an
    :class:`httpx.AsyncClient`. Must be used as an async context manager
    or opened with :meth:`open`.

    Args:
        config: Request settings (base URL, timeout, SSL, headers).
        cache: Store to use. ``None`` shares the process-wide default store.
        transport: Optional :class:`httpx.AsyncBaseTransport` handed to the
            underlying client.
        clock: Time source for expiry computation; must match the store's.

    Example::

        async with AsyncCachedClient(config) as client:
            result = await client.get("/users")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        cache: Optional[CacheStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(config=config, cache=cache, clock=clock)
        self._transport = transport
        self._pending: set[asyncio.Task[httpx.Response]] = set()
        self._cancelled: set[asyncio.Task[httpx.Response]] = set()

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    def open(self) -> AsyncCachedClient:
        """Create the underlying :class:`httpx.AsyncClient` if not already open."""
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport, **self._client_kwargs())
        return self

    async def aclose(self) -> None:
        """Close the underlying client. The cache store is left untouched."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AsyncCachedClient:
        return self.open()

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def get(
        self,
        uri: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Result:
        """Send a GET, answering from the cache when an unexpired entry exists.

        Behaves identically to
        :meth:`~cachedhttp.client.sync_client.CachedClient.get` but is
        non-blocking.
        """
        request = self._build_request("GET", uri, params=params, headers=headers, timeout=timeout)
        key = policy.cache_key(request)

        cached = self._cache_lookup(key)
        if cached is not None:
            return self._cached_result(cached)

        response = await self._send(request)
        self._cache_response(key, response)
        self._map_response_error(response)
        return self._live_result(response)

    async def post(
        self,
        uri: str,
        content: Optional[Union[str, bytes]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a POST and evict the cached GET for *uri* on a 2xx answer."""
        return await self._mutate("POST", uri, content=content, **kwargs)

    async def put(
        self,
        uri: str,
        content: Optional[Union[str, bytes]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a PUT and evict the cached GET for *uri* on a 2xx answer."""
        return await self._mutate("PUT", uri, content=content, **kwargs)

    async def delete(self, uri: str, **kwargs: Any) -> httpx.Response:
        """Send a DELETE and evict the cached GET for *uri* on a 2xx answer."""
        return await self._mutate("DELETE", uri, **kwargs)

    def cancel_pending_requests(self) -> None:
        """Cancel every transport call in flight on this client.

        Must be called from the event loop running the requests.
        """
        for task in self._pending:
            self._cancelled.add(task)
            task.cancel()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _mutate(
        self,
        method: str,
        uri: str,
        content: Optional[Union[str, bytes]] = None,
        json: Optional[Any] = None,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        request = self._build_request(
            method, uri, params=params, headers=headers,
            content=content, json=json, data=data, timeout=timeout,
        )
        response = await self._send(request)
        self._invalidate_if_successful(policy.cache_key(request), response)
        self._map_response_error(response)
        return response

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Await the transport for *request*, tracking it for cancellation."""
        client = self._require_client()
        label = f"{request.method} {request.url}"
        task = asyncio.ensure_future(client.send(request))
        self._pending.add(task)
        try:
            return await task
        except asyncio.CancelledError as exc:
            if task in self._cancelled:
                raise RequestCancelledError(f"{label} was cancelled") from exc
            raise
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(f"{label} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"{label} failed: {exc}") from exc
        finally:
            self._pending.discard(task)
            self._cancelled.discard(task)
