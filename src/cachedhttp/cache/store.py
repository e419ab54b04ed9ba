"""In-memory, thread-safe cache store for GET response bodies.

The store maps a cache key (the normalised request URL) to a
:class:`~cachedhttp.models.CacheEntry` carrying an absolute expiry
timestamp. Expiry is enforced lazily: an entry whose ``expires_at`` has
passed is evicted the moment it is looked up, so an expired value is never
returned as a hit. :meth:`MemoryCacheStore.purge_expired` evicts
proactively for callers that want it.

A single process-wide store is shared by every caching client that is not
given its own. It is created on first use by :func:`get_default_store` and
needs no teardown.
"""

from __future__ import annotations

import abc
import threading
import time
from typing import Any, Callable, Optional

from cachedhttp.models import CacheEntry


class CacheStore(abc.ABC):
    """Interface every cache store implements.

    Implementations must be safe to call from many threads at once and must
    never block on I/O for long: the caching clients call them inline around
    every request.
    """

    @abc.abstractmethod
    def contains(self, key: str) -> bool:
        """Return True iff an unexpired entry exists for *key*."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under *key*, or ``None`` on a miss or expiry."""

    @abc.abstractmethod
    def set(self, key: str, value: Any, expires_at: float) -> None:
        """Install *value* under *key* until the absolute time *expires_at*.

        Replaces any existing entry regardless of its previous expiry.
        """

    @abc.abstractmethod
    def remove(self, key: str) -> None:
        """Delete the entry for *key*. Missing keys are not an error."""

    @abc.abstractmethod
    def count(self) -> int:
        """Return the number of entries currently held."""

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)


class MemoryCacheStore(CacheStore):
    """Dictionary-backed :class:`CacheStore` guarded by a re-entrant lock.

    Args:
        clock: Callable returning the current POSIX time. Must be the same
            clock used to compute the ``expires_at`` values passed to
            :meth:`set`. Defaults to :func:`time.time`.

    Example::

        store = MemoryCacheStore()
        store.set("https://api.example.com/users", "[...]", time.time() + 60)
        store.get("https://api.example.com/users")
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def contains(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def get(self, key: str) -> Optional[Any]:
        entry = self._live_entry(key)
        if entry is None:
            return None
        return entry.value

    def set(self, key: str, value: Any, expires_at: float) -> None:
        entry = CacheEntry(value=value, expires_at=expires_at)
        with self._lock:
            self._entries[key] = entry

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Evict every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def stats(self) -> dict[str, int]:
        """Return ``size`` (entries held) and ``expired`` (held but stale)."""
        now = self._clock()
        with self._lock:
            expired = sum(1 for e in self._entries.values() if e.is_expired(now))
            return {"size": len(self._entries), "expired": expired}

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the unexpired entry for *key*, evicting it if it went stale."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                return None
            return entry


# --------------------------------------------------------------------------- #
# Process-wide default store
# --------------------------------------------------------------------------- #

_default_store: Optional[CacheStore] = None
_default_store_lock = threading.Lock()


def get_default_store() -> CacheStore:
    """Return the process-wide store shared by clients without their own.

    Created as a :class:`MemoryCacheStore` on first call. Safe to call from
    several threads concurrently; all callers receive the same instance.
    """
    global _default_store
    if _default_store is None:
        with _default_store_lock:
            if _default_store is None:
                _default_store = MemoryCacheStore()
    return _default_store


def set_default_store(store: CacheStore) -> None:
    """Install *store* as the process-wide default.

    Clients created afterwards without an explicit store share it; clients
    created earlier keep the store they were given.
    """
    global _default_store
    with _default_store_lock:
        _default_store = store


def reset_default_store() -> None:
    """Drop the process-wide default so the next access creates a fresh one."""
    global _default_store
    with _default_store_lock:
        _default_store = None
