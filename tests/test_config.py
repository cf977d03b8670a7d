"""Tests for configuration loading."""

from pathlib import Path

import pytest

from cronloom.config import (
    ConfigError,
    get_config_path,
    get_cronloom_config,
    get_cronloom_dir,
    load_persistence_options,
    load_scheduler_config,
)
from cronloom.models import PersistenceOptions, SchedulerConfig


def write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestCronloomDir:
    """Tests for home directory resolution."""

    def test_env_override(self, cronloom_home: Path) -> None:
        """Test CRONLOOM_HOME wins."""
        assert get_cronloom_dir() == cronloom_home
        assert get_config_path() == cronloom_home / "config.yaml"

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the default is ~/.cronloom."""
        monkeypatch.delenv("CRONLOOM_HOME", raising=False)
        assert get_cronloom_dir() == Path.home() / ".cronloom"


class TestLoadConfig:
    """Tests for loading config.yaml."""

    def test_missing_file_gives_defaults(self, cronloom_home: Path) -> None:
        """Test defaults when no config file exists."""
        assert get_cronloom_config() == {}
        assert load_scheduler_config() == SchedulerConfig()
        assert load_persistence_options().enabled is False

    def test_empty_file(self, cronloom_home: Path) -> None:
        """Test an empty file is treated as no configuration."""
        write_config(cronloom_home / "config.yaml", "")
        assert load_scheduler_config() == SchedulerConfig()

    def test_scheduler_section(self, cronloom_home: Path) -> None:
        """Test scheduler values are validated into SchedulerConfig."""
        write_config(
            cronloom_home / "config.yaml",
            "scheduler:\n"
            "  polling_interval: 0.5\n"
            "  use_calculated_timeouts: false\n"
            "  max_history_entries: 20\n"
            "  max_consecutive_failures: 3\n"
            "  timezone: UTC\n",
        )
        config = load_scheduler_config()

        assert config.polling_interval == 0.5
        assert config.use_calculated_timeouts is False
        assert config.max_history_entries == 20
        assert config.max_consecutive_failures == 3
        assert config.timezone == "UTC"

    def test_persistence_section(self, tmp_path: Path) -> None:
        """Test persistence values and ~ expansion."""
        path = write_config(
            tmp_path / "custom.yaml",
            "persistence:\n  enabled: true\n  file_path: ~/state.json\n  auto_restore: false\n",
        )
        options = load_persistence_options(path)

        assert options == PersistenceOptions(
            enabled=True,
            file_path=str(Path.home() / "state.json"),
            auto_restore=False,
        )

    def test_invalid_yaml(self, cronloom_home: Path) -> None:
        """Test malformed YAML raises ConfigError."""
        write_config(cronloom_home / "config.yaml", "scheduler: [unclosed")
        with pytest.raises(ConfigError, match="Failed to read config file"):
            load_scheduler_config()

    def test_not_a_mapping(self, cronloom_home: Path) -> None:
        """Test a top-level list is rejected."""
        write_config(cronloom_home / "config.yaml", "- one\n- two\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_scheduler_config()

    def test_section_not_a_mapping(self, cronloom_home: Path) -> None:
        """Test a scalar section is rejected."""
        write_config(cronloom_home / "config.yaml", "persistence: yes\n")
        with pytest.raises(ConfigError, match="'persistence' must be a mapping"):
            load_persistence_options()

    def test_invalid_value(self, cronloom_home: Path) -> None:
        """Test values failing validation raise ConfigError."""
        write_config(cronloom_home / "config.yaml", "scheduler:\n  polling_interval: -1\n")
        with pytest.raises(ConfigError, match="Invalid 'scheduler' configuration"):
            load_scheduler_config()
