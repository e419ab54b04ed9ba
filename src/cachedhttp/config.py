"""Configuration loading and precedence resolution for the caching clients.

Configuration comes from four layers, merged by :func:`resolve_config`
into a single :class:`~cachedhttp.models.ClientConfig`:

* **Defaults** -- the field defaults declared on ``ClientConfig``.
* **Config file** -- a JSON object whose keys are ``ClientConfig`` fields.
  Located through the ``config_path`` argument, the ``CACHEDHTTP_CONFIG``
  environment variable, or ``./cachedhttp.json`` in the working directory.
* **Environment variables** -- ``CACHEDHTTP_BASE_URL``,
  ``CACHEDHTTP_TIMEOUT``, ``CACHEDHTTP_VERIFY_SSL`` and
  ``CACHEDHTTP_RAISE_FOR_STATUS``.
* **Overrides** -- keyword arguments passed by the caller.

Every failure (missing file, invalid JSON, values that fail validation)
surfaces as :class:`~cachedhttp.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from cachedhttp.exceptions import ConfigError
from cachedhttp.models import ClientConfig

_PROJECT_CONFIG_FILENAME = "cachedhttp.json"
_CONFIG_PATH_ENV = "CACHEDHTTP_CONFIG"

_ENV_FIELDS: dict[str, str] = {
    "CACHEDHTTP_BASE_URL": "base_url",
    "CACHEDHTTP_TIMEOUT": "timeout",
    "CACHEDHTTP_VERIFY_SSL": "verify_ssl",
    "CACHEDHTTP_RAISE_FOR_STATUS": "raise_for_status",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# --- Config file ---


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a JSON config file into a dict of ``ClientConfig`` fields.

    Args:
        path: Location of the JSON file.

    Returns:
        The parsed JSON object.

    Raises:
        ConfigError: If the file is missing, unreadable, not valid JSON, or
            does not contain a JSON object.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid config file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {path} must contain a JSON object")
    return data


def _discover_config_path(explicit: Optional[str | Path]) -> Optional[Path]:
    """Pick the config file: explicit argument, then env var, then ``./cachedhttp.json``."""
    if explicit is not None:
        return Path(explicit)
    env_path = os.environ.get(_CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    project = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if project.is_file():
        return project
    return None


# --- Environment ---


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got '{raw}'")


def load_env_config() -> dict[str, Any]:
    """Collect ``ClientConfig`` fields from ``CACHEDHTTP_*`` environment variables.

    Empty variables are ignored.

    Raises:
        ConfigError: If a boolean or numeric variable cannot be parsed.
    """
    values: dict[str, Any] = {}
    for env_name, field in _ENV_FIELDS.items():
        raw = os.environ.get(env_name, "")
        if not raw:
            continue
        if field in ("verify_ssl", "raise_for_status"):
            values[field] = _parse_bool(env_name, raw)
        elif field == "timeout":
            try:
                values[field] = float(raw)
            except ValueError as exc:
                raise ConfigError(
                    f"Environment variable {env_name} must be a number, got '{raw}'"
                ) from exc
        else:
            values[field] = raw
    return values


# --- Precedence resolution ---


def resolve_config(
    config_path: Optional[str | Path] = None,
    **overrides: Any,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Precedence (high to low):
        1. Keyword ``overrides`` whose value is not ``None``
        2. Environment variables (``CACHEDHTTP_*``)
        3. Config file (``config_path``, ``$CACHEDHTTP_CONFIG``, ``./cachedhttp.json``)
        4. Defaults

    Args:
        config_path: Explicit config file location.
        **overrides: ``ClientConfig`` field values, e.g. ``base_url=...``.

    Returns:
        The validated :class:`~cachedhttp.models.ClientConfig`.

    Raises:
        ConfigError: If any layer contains an invalid value.
    """
    merged: dict[str, Any] = {}

    path = _discover_config_path(config_path)
    if path is not None:
        merged.update(load_config_file(path))

    merged.update(load_env_config())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ClientConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc
