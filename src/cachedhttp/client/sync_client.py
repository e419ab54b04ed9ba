"""Blocking caching client over :class:`httpx.Client`.

This module provides :class:`CachedClient`, a decorator around an
``httpx`` client that layers on:

- **GET caching** -- 200 responses carrying ``Cache-Control: max-age=N``
  (N > 0, not ``private``) are kept in a :class:`~cachedhttp.cache.CacheStore`
  for N seconds and served from there until they expire.
- **Invalidation** -- a 2xx POST, PUT or DELETE evicts the cached GET for
  the same URL.
- **Cancellation** -- per-request :class:`~cachedhttp.client.cancellation.CancelToken`
  and :meth:`CachedClient.cancel_pending_requests`.
- **Error mapping** -- network failures become
  :class:`~cachedhttp.exceptions.TransportError`, and 4xx/5xx become typed
  exceptions when ``raise_for_status`` is configured.

The client holds no lock across the transport call, so one instance can be
shared by many threads.

See Also:
    :class:`~cachedhttp.client.async_client.AsyncCachedClient` for the
    asyncio equivalent.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional, Union

import httpx

from cachedhttp.cache import policy
from cachedhttp.cache.store import CacheStore
from cachedhttp.client.base import BaseCachingClient
from cachedhttp.client.cancellation import CancelToken
from cachedhttp.exceptions import RequestCancelledError, RequestTimeoutError, TransportError
from cachedhttp.models import ClientConfig, Result


class CachedClient(BaseCachingClient):
    """Blocking HTTP client that caches GET responses in memory.

    Must be opened before use, either as a context manager or through
    :meth:`open`, so that the underlying :class:`httpx.Client` exists.

    Args:
        config: Request settings (base URL, timeout, SSL, headers).
        cache: Store to use. ``None`` shares the process-wide default store.
        transport: Optional :class:`httpx.BaseTransport` handed to the
            underlying client, e.g. :class:`httpx.MockTransport` in tests.
        clock: Time source for expiry computation; must match the store's.

    Example::

        with CachedClient(ClientConfig(base_url="https://api.example.com")) as client:
            first = client.get("/users")    # was_cached=False
            second = client.get("/users")   # was_cached=True if max-age > 0
            client.delete("/users")         # evicts /users on 2xx
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        cache: Optional[CacheStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(config=config, cache=cache, clock=clock)
        self._transport = transport
        self._pending: set[CancelToken] = set()
        self._pending_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def open(self) -> CachedClient:
        """Create the underlying :class:`httpx.Client` if not already open."""
        if self._client is None:
            self._client = httpx.Client(transport=self._transport, **self._client_kwargs())
        return self

    def close(self) -> None:
        """Close the underlying client. The cache store is left untouched."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> CachedClient:
        return self.open()

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def get(
        self,
        uri: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> Result:
        """Send a GET, answering from the cache when an unexpired entry exists.

        Args:
            uri: Absolute URL, or path merged with the configured ``base_url``.
            params: Query parameters; part of the cache key.
            headers: Extra request headers; not part of the cache key.
            timeout: Per-request timeout in seconds.
            cancel_token: Token that aborts the request when cancelled. A
                token cancelled mid-flight takes effect once the transport
                returns; see :meth:`cancel_pending_requests`.

        Returns:
            A :class:`~cachedhttp.models.Result` whose ``was_cached`` tells
            whether the transport was bypassed.

        Raises:
            RequestCancelledError: If the token or
                :meth:`cancel_pending_requests` fired.
            TransportError: On network failure (``RequestTimeoutError`` on
                timeout).
            HTTPStatusError: On 4xx/5xx when ``raise_for_status`` is set.
        """
        request = self._build_request("GET", uri, params=params, headers=headers, timeout=timeout)
        key = policy.cache_key(request)

        cached = self._cache_lookup(key)
        if cached is not None:
            return self._cached_result(cached)

        response = self._send(request, cancel_token)
        self._cache_response(key, response)
        self._map_response_error(response)
        return self._live_result(response)

    def post(
        self,
        uri: str,
        content: Optional[Union[str, bytes]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a POST and evict the cached GET for *uri* on a 2xx answer.

        Args:
            uri: Absolute URL, or path merged with the configured ``base_url``.
            content: Raw request body.
            **kwargs: ``json``, ``data``, ``params``, ``headers``,
                ``timeout`` and ``cancel_token``, as for :meth:`get`.

        Returns:
            The unmodified :class:`httpx.Response`.
        """
        return self._mutate("POST", uri, content=content, **kwargs)

    def put(
        self,
        uri: str,
        content: Optional[Union[str, bytes]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a PUT and evict the cached GET for *uri* on a 2xx answer.

        Takes the same arguments as :meth:`post`.
        """
        return self._mutate("PUT", uri, content=content, **kwargs)

    def delete(self, uri: str, **kwargs: Any) -> httpx.Response:
        """Send a DELETE and evict the cached GET for *uri* on a 2xx answer."""
        return self._mutate("DELETE", uri, **kwargs)

    def cancel_pending_requests(self) -> None:
        """Cancel every request currently in flight on this client.

        A blocking transport call cannot be interrupted: a request already
        waiting on the transport runs to completion (or to its timeout),
        then its response is closed unread and the request raises
        :class:`~cachedhttp.exceptions.RequestCancelledError`. The cache is
        not touched. Bound the wait with ``timeout``, or use
        :class:`~cachedhttp.client.async_client.AsyncCachedClient` where
        cancellation aborts the transport call itself. Later requests are
        unaffected.
        """
        with self._pending_lock:
            for token in self._pending:
                token.cancel()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _mutate(
        self,
        method: str,
        uri: str,
        content: Optional[Union[str, bytes]] = None,
        json: Optional[Any] = None,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> httpx.Response:
        request = self._build_request(
            method, uri, params=params, headers=headers,
            content=content, json=json, data=data, timeout=timeout,
        )
        response = self._send(request, cancel_token)
        self._invalidate_if_successful(policy.cache_key(request), response)
        self._map_response_error(response)
        return response

    def _send(self, request: httpx.Request, cancel_token: Optional[CancelToken]) -> httpx.Response:
        """Hand *request* to the transport, honouring cancellation and mapping errors."""
        client = self._require_client()
        label = f"{request.method} {request.url}"
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(label)

        # Each request gets its own token so cancel_pending_requests only
        # reaches requests that are still in flight.
        own_token = CancelToken()
        with self._pending_lock:
            self._pending.add(own_token)
        try:
            response = client.send(request)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(f"{label} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"{label} failed: {exc}") from exc
        finally:
            with self._pending_lock:
                self._pending.discard(own_token)

        if own_token.cancelled or (cancel_token is not None and cancel_token.cancelled):
            response.close()
            raise RequestCancelledError(f"{label} was cancelled")
        return response
