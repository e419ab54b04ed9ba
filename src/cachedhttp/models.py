"""Canonical Pydantic models shared across all cachedhttp modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- loaded from JSON, environment variables or
keyword arguments by :func:`~cachedhttp.config.resolve_config`:
    :class:`ClientConfig`.

**Cache models** -- produced by the cache policy and the caching clients:
    :class:`CacheControl`, :class:`CacheEntry`, and :class:`Result`.

All models use Pydantic v2. The cache models are frozen because they are
shared between threads through the cache store.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Client Config ---


class ClientConfig(BaseModel):
    """Settings applied to every request made by a caching client.

    See Also:
        :func:`~cachedhttp.config.resolve_config`: Builds an instance from
        defaults, a config file, environment variables, and overrides.
    """

    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(
        default="", description="Prefix merged into relative request URLs"
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Transport timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(
        default=True, description="Let the transport follow redirects"
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )
    raise_for_status: bool = Field(
        default=False,
        description="Raise HTTPStatusError for 4xx/5xx instead of returning them",
    )


# --- Cache Models ---


class CacheControl(BaseModel):
    """Parsed view of a response's ``Cache-Control`` header.

    Only the two directives the cache honours are kept: ``private`` and
    ``max-age``. A ``max_age`` of ``None`` means the directive was missing
    or malformed.
    """

    model_config = ConfigDict(frozen=True)

    private: bool = False
    max_age: Optional[float] = Field(
        default=None, description="Lifetime in seconds from the max-age directive"
    )


class CacheEntry(BaseModel):
    """A cached value together with its absolute expiry timestamp."""

    model_config = ConfigDict(frozen=True)

    value: Any
    expires_at: float = Field(description="POSIX timestamp after which the entry is stale")

    def is_expired(self, now: float) -> bool:
        """Return True once *now* has reached ``expires_at``."""
        return now >= self.expires_at


class Result(BaseModel):
    """Outcome of a GET made through a caching client.

    ``was_cached`` is True iff ``body`` came from the cache store rather than
    the transport. Cache hits always report ``status_code`` 200 because only
    200 responses are ever stored.
    """

    model_config = ConfigDict(frozen=True)

    body: str
    status_code: int
    was_cached: bool = False

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
