"""Exception hierarchy for cachedhttp.

All exceptions inherit from :class:`CachedHttpError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`cachedhttp.exit_codes`.
The library raises these from the caching clients; the command line entry
point in :func:`cachedhttp.cli.main` catches ``CachedHttpError`` and exits
with the matching code.

Subclass hierarchy::

    CachedHttpError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- ConfigError              (exit 1)
    +-- TransportError           (exit 6)
    |   +-- RequestTimeoutError  (exit 6)
    +-- RequestCancelledError    (exit 130)
    +-- HTTPStatusError          (exit 1)
        +-- AuthError            (exit 3)
        +-- NotFoundError        (exit 4)
        +-- ServerError          (exit 5)
        +-- ClientError          (exit 1)

Cache store failures are deliberately absent: a failing store never fails a
request, it is logged and the client falls back to the transport.
"""

from __future__ import annotations

from cachedhttp.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class CachedHttpError(Exception):
    """Base exception for all cachedhttp errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`cachedhttp.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CachedHttpError):
    """Raised when a client is used incorrectly (e.g. outside its context manager)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(CachedHttpError):
    """Raised for configuration problems (unreadable file, invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class TransportError(CachedHttpError):
    """Raised on network-level failures (DNS resolution, connection refused, reset)."""

    exit_code = EXIT_CONNECTION_ERROR


class RequestTimeoutError(TransportError):
    """Raised when the transport call exceeds its timeout."""


class RequestCancelledError(CachedHttpError):
    """Raised when a request is cancelled through a token or ``cancel_pending_requests``."""

    exit_code = EXIT_CANCELLED


class HTTPStatusError(CachedHttpError):
    """Raised for non-2xx responses when ``raise_for_status`` is enabled.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code returned by the origin.
    """

    def __init__(self, message: str, status_code: int, exit_code: int | None = None):
        super().__init__(message, exit_code=exit_code)
        self.status_code = status_code


class AuthError(HTTPStatusError):
    """Raised when the origin returns HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(HTTPStatusError):
    """Raised when the origin returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(HTTPStatusError):
    """Raised when the origin returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ClientError(HTTPStatusError):
    """Raised for any other 4xx response."""


def error_for_status(status_code: int, message: str) -> HTTPStatusError:
    """Build the :class:`HTTPStatusError` subclass matching *status_code*."""
    if status_code in (401, 403):
        return AuthError(message, status_code)
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code >= 500:
        return ServerError(message, status_code)
    return ClientError(message, status_code)
