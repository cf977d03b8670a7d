"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from cronloom.engine.job import CronJob


@pytest.fixture
def cronloom_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point CRONLOOM_HOME at a temporary directory."""
    home = tmp_path / ".cronloom"
    monkeypatch.setenv("CRONLOOM_HOME", str(home))
    return home


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """Path for a scheduler state document (not created)."""
    return tmp_path / "state" / "cronloom-state.json"


@pytest.fixture
def make_job() -> Callable[..., CronJob]:
    """Factory for jobs with a no-op callback and a daily schedule."""

    def factory(name: str = "test-job", cron: str = "@daily", **kwargs: Any) -> CronJob:
        callback = kwargs.pop("callback", lambda: None)
        return CronJob(name, cron, callback, **kwargs)

    return factory
