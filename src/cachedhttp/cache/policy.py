"""Rules that decide whether a response is cached, for how long, and when to evict.

Only two ``Cache-Control`` directives are honoured:

* ``max-age=N`` -- the response may be reused for ``N`` seconds.
* ``private`` -- the response is meant for a single user and is never
  stored, whatever its max-age.

A GET response is stored only when its status is exactly 200 and its
``Cache-Control`` carries a positive ``max-age`` without ``private``.
Anything missing or malformed is read conservatively as "do not cache";
parsing never raises. A mutating request invalidates the key when its
response is 2xx.
"""

from __future__ import annotations

import re
from typing import Optional

import httpx

from cachedhttp.models import CacheControl

CACHEABLE_STATUS = 200

#: Ceiling applied to very large max-age values (RFC 9111 section 1.2.2).
MAX_AGE_LIMIT = 2**31

_DELTA_SECONDS = re.compile(r"[0-9]+")


def cache_key(request: httpx.Request) -> str:
    """Return the cache key for *request*: its fully merged, normalised URL.

    ``httpx`` normalises scheme and host case, default ports and
    percent-encoding, so equivalent spellings of a URL share a key while the
    path and query still distinguish resources.
    """
    return str(request.url)


def _parse_max_age(raw: str) -> Optional[float]:
    value = raw.strip().strip('"')
    if _DELTA_SECONDS.fullmatch(value) is None:
        return None
    digits = value.lstrip("0") or "0"
    if len(digits) > len(str(MAX_AGE_LIMIT)):
        return float(MAX_AGE_LIMIT)
    return float(min(int(digits), MAX_AGE_LIMIT))


def parse_cache_control(headers: httpx.Headers) -> Optional[CacheControl]:
    """Parse the ``Cache-Control`` header(s) of a response.

    Multiple header lines are combined as if comma-joined. Directive names
    are case-insensitive. The first ``max-age`` occurrence wins; a value
    that is not a run of ASCII digits leaves ``max_age`` unset, and values
    above :data:`MAX_AGE_LIMIT` are clamped to it. ``private``
    counts whether or not it names specific fields.

    Args:
        headers: The response headers.

    Returns:
        The parsed :class:`~cachedhttp.models.CacheControl`, or ``None`` if
        the response carries no ``Cache-Control`` header at all.
    """
    values = headers.get_list("cache-control")
    if not values:
        return None

    private = False
    max_age: Optional[float] = None
    seen_max_age = False

    for directive in ",".join(values).split(","):
        name, _, argument = directive.strip().partition("=")
        name = name.strip().lower()
        if name == "private":
            private = True
        elif name == "max-age" and not seen_max_age:
            seen_max_age = True
            max_age = _parse_max_age(argument)

    return CacheControl(private=private, max_age=max_age)


def is_cacheable(status_code: int, cache_control: Optional[CacheControl]) -> bool:
    """Return True iff a GET response with these properties may be stored."""
    if status_code != CACHEABLE_STATUS:
        return False
    if cache_control is None or cache_control.private:
        return False
    return cache_control.max_age is not None and cache_control.max_age > 0


def expires_at(cache_control: CacheControl, now: float) -> float:
    """Absolute expiry for a cacheable response received at *now*."""
    if cache_control.max_age is None:
        raise ValueError("Cache-Control carries no max-age")
    return now + cache_control.max_age


def invalidates(status_code: int) -> bool:
    """Return True iff a mutating request with this status evicts its key."""
    return 200 <= status_code < 300
