"""Configuration management for cronloom."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cronloom.models import PersistenceOptions, SchedulerConfig

CONFIG_FILENAME = "config.yaml"

DEFAULT_CONFIG = """\
# cronloom configuration

scheduler:
  polling_interval: 1.0
  use_calculated_timeouts: true
  max_history_entries: 100
  # max_consecutive_failures: 5
  # timezone: Europe/Paris

persistence:
  enabled: false
  file_path: ~/.cronloom/state.json
  auto_restore: true
"""


class ConfigError(Exception):
    """Error loading or accessing configuration."""


def get_cronloom_dir() -> Path:
    """Get the cronloom home directory.

    ``CRONLOOM_HOME`` takes priority over ``~/.cronloom``.

    Returns:
        Path to the directory (not created).
    """
    if home := os.environ.get("CRONLOOM_HOME"):
        return Path(home).expanduser()
    return Path.home() / ".cronloom"


def get_config_path() -> Path:
    return get_cronloom_dir() / CONFIG_FILENAME


def get_cronloom_config(path: Path | None = None) -> dict[str, Any]:
    """Load the cronloom configuration file.

    Args:
        path: Config file to read. Defaults to ``get_config_path()``.

    Returns:
        Configuration dictionary, empty if the file doesn't exist.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return config


def load_scheduler_config(path: Path | None = None) -> SchedulerConfig:
    """Load the ``scheduler`` section as a SchedulerConfig.

    Raises:
        ConfigError: If the file or the section is invalid.
    """
    section = _section(get_cronloom_config(path), "scheduler")
    try:
        return SchedulerConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid 'scheduler' configuration: {e}") from e


def load_persistence_options(path: Path | None = None) -> PersistenceOptions:
    """Load the ``persistence`` section as PersistenceOptions.

    Raises:
        ConfigError: If the file or the section is invalid.
    """
    section = _section(get_cronloom_config(path), "persistence")
    try:
        options = PersistenceOptions.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid 'persistence' configuration: {e}") from e
    options.file_path = str(Path(options.file_path).expanduser())
    return options


def _section(config: dict[str, Any], key: str) -> dict[str, Any]:
    section = config.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return section
