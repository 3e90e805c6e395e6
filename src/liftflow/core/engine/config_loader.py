"""
YAML → typed settings loader.

Defaults come from core/config.py; a user file at ~/.liftflow/config.yaml
(or $LIFTFLOW_HOME/config.yaml) may override any of them:

    rest_timer:
      default_seconds: 90
    auto_fill:
      kg_increment: 2.5
      lb_increment: 5
    storage:
      path: ~/workouts/current.json

Usage:
    from liftflow.core.engine.config_loader import load_settings
    settings = load_settings()
    settings.default_rest_seconds

If the user file has parse errors or wrong types, a warning is issued and
the defaults are used (no crash).
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    APP_DIR_NAME,
    AUTOSAVE_FILENAME,
    CONFIG_FILENAME,
    DEFAULT_REST_SECONDS,
    HOME_ENV_VAR,
    KG_INCREMENT,
    LB_INCREMENT,
)


@dataclass(frozen=True)
class Settings:
    """Resolved user-adjustable settings."""

    default_rest_seconds: int = DEFAULT_REST_SECONDS
    kg_increment: float = KG_INCREMENT
    lb_increment: float = LB_INCREMENT
    storage_path: Path | None = None  # None = <app dir>/workout.json


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; warn and return {} on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"liftflow: ignoring config file {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_app_dir() -> Path:
    """Return the liftflow directory ($LIFTFLOW_HOME or ~/.liftflow)."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / APP_DIR_NAME


def get_user_config_path() -> Path | None:
    """Return the user config.yaml if it exists, else None."""
    p = get_app_dir() / CONFIG_FILENAME
    return p if p.exists() else None


def load_config() -> dict[str, Any]:
    """
    Load the raw config mapping.

    Returns:
        Merged dict of config sections.  Empty dict if no user file.
    """
    config: dict[str, Any] = {}
    user = get_user_config_path()
    if user is not None:
        config = _deep_merge(config, _load_yaml_file(user))
    return config


def settings_from_dict(config: dict[str, Any]) -> Settings:
    """
    Convert a raw config mapping to Settings.

    Raises:
        ValueError: If a value has the wrong type or is not positive
    """
    rest = config.get("rest_timer") or {}
    auto = config.get("auto_fill") or {}
    storage = config.get("storage") or {}

    try:
        default_rest = int(rest.get("default_seconds", DEFAULT_REST_SECONDS))
        kg = float(auto.get("kg_increment", KG_INCREMENT))
        lb = float(auto.get("lb_increment", LB_INCREMENT))
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid config value: {exc}") from exc

    if default_rest <= 0:
        raise ValueError("rest_timer.default_seconds must be positive")
    if kg < 0 or lb < 0:
        raise ValueError("auto_fill increments must be non-negative")

    raw_path = storage.get("path") if isinstance(storage, dict) else None
    storage_path = Path(str(raw_path)).expanduser() if raw_path else None

    return Settings(
        default_rest_seconds=default_rest,
        kg_increment=kg,
        lb_increment=lb,
        storage_path=storage_path,
    )


def load_settings() -> Settings:
    """Load settings, falling back to defaults when the config is invalid."""
    try:
        return settings_from_dict(load_config())
    except ValueError as exc:
        warnings.warn(f"liftflow: invalid config ({exc}); using defaults.", stacklevel=2)
        return Settings()


def get_default_store_path(settings: Settings | None = None) -> Path:
    """Autosave file path: storage.path from settings, else <app dir>/workout.json."""
    if settings is not None and settings.storage_path is not None:
        return settings.storage_path
    return get_app_dir() / AUTOSAVE_FILENAME
