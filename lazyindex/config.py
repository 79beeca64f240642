"""Catalog configuration.

Settings are resolved in order, later sources winning:

1. built-in defaults
2. a YAML config file (``--config``, ``$LAZYINDEX_CONFIG``, or
   ``~/.lazyindex/config.yaml`` when present)
3. ``LAZYINDEX_REGISTRY_DIR`` / ``LAZYINDEX_LOG_LEVEL``
4. command-line options (applied by the CLI)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from lazyindex.errors import ConfigError

CONFIG_ENV = "LAZYINDEX_CONFIG"
REGISTRY_DIR_ENV = "LAZYINDEX_REGISTRY_DIR"
LOG_LEVEL_ENV = "LAZYINDEX_LOG_LEVEL"
DEBUG_ENV = "LAZYINDEX_DEBUG"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_home() -> Path:
    return Path.home() / ".lazyindex"


@dataclass
class CatalogConfig:
    """Resolved settings for the catalog and its CLI."""

    registry_dir: Path = field(default_factory=lambda: default_home() / "registry")
    log_level: str = "WARNING"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


def _default_config_path() -> Path | None:
    env_path = os.environ.get(CONFIG_ENV, "")
    if env_path:
        return Path(env_path)
    candidate = default_home() / "config.yaml"
    return candidate if candidate.exists() else None


def _check_log_level(value, source: str) -> str:
    level = str(value).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"{source}: log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return level


def load_config(path: str | Path | None = None) -> CatalogConfig:
    """Load configuration from file and environment.

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds unknown keys.
    """
    config = CatalogConfig()

    config_path = Path(path) if path else _default_config_path()
    if config_path is not None:
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"cannot read config file {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {config_path}: {e}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path}: expected a mapping at the top level")

        unknown = sorted(set(data) - {"registry_dir", "log_level"})
        if unknown:
            raise ConfigError(f"{config_path}: unknown settings {', '.join(unknown)}")

        if "registry_dir" in data:
            config.registry_dir = Path(str(data["registry_dir"])).expanduser()
        if "log_level" in data:
            config.log_level = _check_log_level(data["log_level"], str(config_path))

    env_dir = os.environ.get(REGISTRY_DIR_ENV, "")
    if env_dir:
        config.registry_dir = Path(env_dir).expanduser()
    env_level = os.environ.get(LOG_LEVEL_ENV, "")
    if env_level:
        config.log_level = _check_log_level(env_level, LOG_LEVEL_ENV)

    return config


def debug_from_env() -> bool:
    return os.environ.get(DEBUG_ENV, "").lower() in ("1", "true", "yes")
