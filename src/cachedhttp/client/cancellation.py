"""Cancellation signal for the blocking caching client.

A :class:`CancelToken` is a thin wrapper over :class:`threading.Event`
that one thread sets and the thread running a request observes. The
blocking client checks it before handing the request to the transport and
again once the transport returns, discarding the response when it fired in
between. The transport call itself is bounded by the request timeout.
"""

from __future__ import annotations

import threading

from cachedhttp.exceptions import RequestCancelledError


class CancelToken:
    """Thread-safe, one-shot cancellation flag.

    Example::

        token = CancelToken()
        threading.Timer(0.5, token.cancel).start()
        client.get("/slow", cancel_token=token)  # may raise RequestCancelledError
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, what: str = "Request") -> None:
        """Raise :class:`RequestCancelledError` if the token has fired."""
        if self._event.is_set():
            raise RequestCancelledError(f"{what} was cancelled")
