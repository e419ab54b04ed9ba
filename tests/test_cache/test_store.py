"""Tests for the in-memory cache store and the process-wide default."""

from __future__ import annotations

import threading

import pytest

from cachedhttp.cache.store import (
    CacheStore,
    MemoryCacheStore,
    get_default_store,
    reset_default_store,
    set_default_store,
)


# ------------------------------------------------------------------ #
# Core contains/get/set behaviour
# ------------------------------------------------------------------ #


class TestGetSet:
    def test_never_written_key_is_absent(self, store: MemoryCacheStore) -> None:
        assert store.contains("https://api.example.com/missing") is False
        assert store.get("https://api.example.com/missing") is None

    def test_set_then_get(self, store: MemoryCacheStore, clock) -> None:
        store.set("https://api.example.com/users", "[1, 2]", clock.now + 60)
        assert store.contains("https://api.example.com/users") is True
        assert store.get("https://api.example.com/users") == "[1, 2]"

    def test_set_replaces_existing_entry(self, store: MemoryCacheStore, clock) -> None:
        """A later set wins even when it expires sooner."""
        store.set("k", "old", clock.now + 600)
        store.set("k", "new", clock.now + 5)
        assert store.get("k") == "new"
        clock.advance(10)
        assert store.get("k") is None

    def test_in_operator(self, store: MemoryCacheStore, clock) -> None:
        store.set("k", "v", clock.now + 1)
        assert "k" in store
        assert "other" not in store
        assert 42 not in store


# ------------------------------------------------------------------ #
# Expiry
# ------------------------------------------------------------------ #


class TestExpiry:
    def test_entry_live_until_expiry(self, store: MemoryCacheStore, clock) -> None:
        store.set("k", "v", clock.now + 10)
        clock.advance(9.999)
        assert store.get("k") == "v"

    def test_entry_expires_at_exact_timestamp(self, store: MemoryCacheStore, clock) -> None:
        store.set("k", "v", clock.now + 10)
        clock.advance(10)
        assert store.contains("k") is False
        assert store.get("k") is None

    def test_expired_entry_is_evicted_on_lookup(self, store: MemoryCacheStore, clock) -> None:
        store.set("k", "v", clock.now + 1)
        clock.advance(2)
        assert store.count() == 1
        assert store.contains("k") is False
        assert store.count() == 0

    def test_expiry_in_the_past_is_never_a_hit(self, store: MemoryCacheStore, clock) -> None:
        store.set("k", "v", clock.now - 1)
        assert store.get("k") is None

    def test_purge_expired(self, store: MemoryCacheStore, clock) -> None:
        store.set("a", "1", clock.now + 1)
        store.set("b", "2", clock.now + 1)
        store.set("c", "3", clock.now + 100)
        clock.advance(5)
        assert store.purge_expired() == 2
        assert store.count() == 1
        assert store.get("c") == "3"


# ------------------------------------------------------------------ #
# Remove, clear, count, stats
# ------------------------------------------------------------------ #


class TestRemoveAndCount:
    def test_remove_deletes_only_target(self, store: MemoryCacheStore, clock) -> None:
        store.set("a", "1", clock.now + 60)
        store.set("b", "2", clock.now + 60)
        store.remove("a")
        assert store.get("a") is None
        assert store.get("b") == "2"

    def test_remove_missing_key_no_error(self, store: MemoryCacheStore) -> None:
        store.remove("nope")
        assert store.count() == 0

    def test_count_grows_per_distinct_key(self, store: MemoryCacheStore, clock) -> None:
        store.set("a", "1", clock.now + 60)
        assert store.count() == 1
        store.set("b", "2", clock.now + 60)
        assert store.count() == 2
        store.set("b", "3", clock.now + 60)
        assert len(store) == 2

    def test_clear(self, store: MemoryCacheStore, clock) -> None:
        store.set("a", "1", clock.now + 60)
        store.set("b", "2", clock.now + 60)
        store.clear()
        assert store.count() == 0

    def test_stats(self, store: MemoryCacheStore, clock) -> None:
        store.set("a", "1", clock.now + 1)
        store.set("b", "2", clock.now + 60)
        clock.advance(5)
        assert store.stats() == {"size": 2, "expired": 1}


# ------------------------------------------------------------------ #
# Concurrency
# ------------------------------------------------------------------ #


class TestConcurrency:
    def test_concurrent_writers_lose_no_entries(self) -> None:
        store = MemoryCacheStore()
        far_future = 4_000_000_000.0

        def writer(prefix: int) -> None:
            for i in range(200):
                store.set(f"{prefix}-{i}", str(i), far_future)
                store.contains(f"{prefix}-{i}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.count() == 8 * 200
        assert store.get("3-199") == "199"

    def test_concurrent_set_and_remove_same_key(self) -> None:
        store = MemoryCacheStore()
        far_future = 4_000_000_000.0

        def churn() -> None:
            for _ in range(500):
                store.set("k", "v", far_future)
                store.get("k")
                store.remove("k")

        threads = [threading.Thread(target=churn) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.count() in (0, 1)
        assert store.get("k") in (None, "v")


# ------------------------------------------------------------------ #
# Process-wide default store
# ------------------------------------------------------------------ #


class TestDefaultStore:
    def test_default_store_is_singleton(self) -> None:
        assert get_default_store() is get_default_store()
        assert isinstance(get_default_store(), MemoryCacheStore)

    def test_reset_creates_fresh_store(self) -> None:
        first = get_default_store()
        reset_default_store()
        assert get_default_store() is not first

    def test_set_default_store(self, store: MemoryCacheStore) -> None:
        set_default_store(store)
        assert get_default_store() is store

    def test_concurrent_first_use_yields_one_store(self) -> None:
        seen: list[CacheStore] = []
        barrier = threading.Barrier(8)

        def grab() -> None:
            barrier.wait()
            seen.append(get_default_store())

        threads = [threading.Thread(target=grab) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(s) for s in seen}) == 1

    def test_cache_store_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            CacheStore()  # type: ignore[abstract]
