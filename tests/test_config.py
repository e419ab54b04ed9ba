"""Tests for cachedhttp.config -- config files, env vars, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from cachedhttp.config import load_config_file, load_env_config, resolve_config
from cachedhttp.exceptions import ConfigError
from cachedhttp.models import ClientConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------


class TestLoadConfigFile:
    def test_reads_json_object(self, tmp_path: Path) -> None:
        path = tmp_path / "c.json"
        _write_json(path, {"base_url": "https://x.example.com", "timeout": 5})
        assert load_config_file(path) == {"base_url": "https://x.example.com", "timeout": 5}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "c.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config_file(path)

    def test_non_object_json(self, tmp_path: Path) -> None:
        path = tmp_path / "c.json"
        _write_json(path, [1, 2, 3])
        with pytest.raises(ConfigError, match="JSON object"):
            load_config_file(path)


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------


class TestEnvConfig:
    def test_empty_environment(self, isolated_env: Path) -> None:
        assert load_env_config() == {}

    def test_all_variables(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHEDHTTP_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("CACHEDHTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("CACHEDHTTP_VERIFY_SSL", "false")
        monkeypatch.setenv("CACHEDHTTP_RAISE_FOR_STATUS", "Yes")
        assert load_env_config() == {
            "base_url": "https://env.example.com",
            "timeout": 2.5,
            "verify_ssl": False,
            "raise_for_status": True,
        }

    def test_bad_boolean(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHEDHTTP_VERIFY_SSL", "maybe")
        with pytest.raises(ConfigError, match="CACHEDHTTP_VERIFY_SSL"):
            load_env_config()

    def test_bad_number(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHEDHTTP_TIMEOUT", "soon")
        with pytest.raises(ConfigError, match="CACHEDHTTP_TIMEOUT"):
            load_env_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_env: Path) -> None:
        assert resolve_config() == ClientConfig()

    def test_project_file_is_discovered(self, isolated_env: Path) -> None:
        _write_json(isolated_env / "cachedhttp.json", {"base_url": "https://project.example.com"})
        assert resolve_config().base_url == "https://project.example.com"

    def test_env_path_beats_project_file(
        self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_env / "cachedhttp.json", {"timeout": 1})
        _write_json(isolated_env / "other.json", {"timeout": 2})
        monkeypatch.setenv("CACHEDHTTP_CONFIG", str(isolated_env / "other.json"))
        assert resolve_config().timeout == 2

    def test_explicit_path_beats_env_path(
        self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_env / "env.json", {"timeout": 2})
        _write_json(isolated_env / "explicit.json", {"timeout": 3})
        monkeypatch.setenv("CACHEDHTTP_CONFIG", str(isolated_env / "env.json"))
        assert resolve_config(isolated_env / "explicit.json").timeout == 3

    def test_env_beats_file(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_env / "cachedhttp.json", {"base_url": "https://file.example.com"})
        monkeypatch.setenv("CACHEDHTTP_BASE_URL", "https://env.example.com")
        assert resolve_config().base_url == "https://env.example.com"

    def test_overrides_beat_env(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHEDHTTP_BASE_URL", "https://env.example.com")
        config = resolve_config(base_url="https://arg.example.com")
        assert config.base_url == "https://arg.example.com"

    def test_none_overrides_ignored(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHEDHTTP_TIMEOUT", "9")
        assert resolve_config(timeout=None).timeout == 9

    def test_invalid_value_raises_config_error(self, isolated_env: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid client configuration"):
            resolve_config(timeout=-1)

    def test_unknown_field_in_file(self, isolated_env: Path) -> None:
        _write_json(isolated_env / "cachedhttp.json", {"ttl": 5})
        with pytest.raises(ConfigError):
            resolve_config()
