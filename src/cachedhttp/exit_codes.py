"""Numeric process exit codes used by the ``cachedhttp`` command line tool.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~cachedhttp.exceptions.CachedHttpError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ cachedhttp get https://api.example.com/missing
    $ echo $?
    4   # EXIT_NOT_FOUND -- the origin answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The origin rejected the request (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The origin returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CANCELLED = 130
"""The request was cancelled before it completed."""
