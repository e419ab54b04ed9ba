"""Shared test fixtures for cachedhttp.

Provides a controllable clock, isolated cache stores, and environment
isolation for configuration tests. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cachedhttp.cache.store import MemoryCacheStore, reset_default_store


class FakeClock:
    """Manually advanced clock standing in for :func:`time.time`."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Auto-reset the process-wide store between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_default_store_between_tests() -> None:
    """Give every test a fresh process-wide default store."""
    reset_default_store()
    yield
    reset_default_store()


# ---------------------------------------------------------------------------
# Clock and store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryCacheStore:
    """An isolated store driven by the fake clock."""
    return MemoryCacheStore(clock=clock)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear all CACHEDHTTP_* variables and run inside tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    for var in [
        "CACHEDHTTP_CONFIG",
        "CACHEDHTTP_BASE_URL",
        "CACHEDHTTP_TIMEOUT",
        "CACHEDHTTP_VERIFY_SSL",
        "CACHEDHTTP_RAISE_FOR_STATUS",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
