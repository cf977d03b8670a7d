"""Tests for the JSON state store."""

from datetime import datetime
from pathlib import Path

import pytest

from cronloom.engine.errors import ErrorCategory, StateError
from cronloom.models import (
    ExecutionRecord,
    JobMetrics,
    JobSnapshot,
    JobStatus,
    SchedulerConfig,
    SchedulerStateDocument,
)
from cronloom.storage import StateStore


@pytest.fixture
def document() -> SchedulerStateDocument:
    """A state document with one job."""
    return SchedulerStateDocument(
        timestamp=datetime(2024, 6, 1, 12, 0),
        jobs=[
            JobSnapshot(
                name="backup",
                cron="0 30 2 * * *",
                status=JobStatus.RUNNING,
                priority=5,
                metrics=JobMetrics(total_executions=2, success_count=1, failure_count=1),
                history=[
                    ExecutionRecord(
                        started_at=datetime(2024, 6, 1, 2, 30),
                        duration_ms=12.5,
                        succeeded=False,
                        error_message="disk full",
                    )
                ],
            )
        ],
        config=SchedulerConfig(polling_interval=2.0),
    )


class TestStateStore:
    """Tests for StateStore."""

    def test_save_and_load(self, state_file: Path, document: SchedulerStateDocument) -> None:
        """Test a saved document loads back unchanged."""
        store = StateStore(state_file)
        store.save(document)

        assert store.exists()
        assert store.load() == document

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        """Test missing parent directories are created."""
        path = tmp_path / "a" / "b" / "state.json"
        StateStore(path).save(SchedulerStateDocument())
        assert path.exists()

    def test_no_temp_files_left(self, state_file: Path, document: SchedulerStateDocument) -> None:
        """Test the atomic write cleans up after itself."""
        store = StateStore(state_file)
        store.save(document)
        store.save(document)

        assert [p.name for p in state_file.parent.iterdir()] == [state_file.name]

    def test_missing_file(self, state_file: Path) -> None:
        """Test loading a missing file returns None."""
        assert StateStore(state_file).load() is None

    def test_malformed_json(self, state_file: Path) -> None:
        """Test unparsable content raises StateError."""
        state_file.parent.mkdir(parents=True)
        state_file.write_text("{not json")

        with pytest.raises(StateError, match="Invalid state file") as exc_info:
            StateStore(state_file).load()
        assert exc_info.value.category == ErrorCategory.PERSISTENCE
        assert exc_info.value.context["path"] == str(state_file)

    def test_invalid_document(self, state_file: Path) -> None:
        """Test well-formed JSON with the wrong shape raises StateError."""
        state_file.parent.mkdir(parents=True)
        state_file.write_text('{"jobs": [{"name": "x"}]}')

        with pytest.raises(StateError):
            StateStore(state_file).load()

    def test_clear(self, state_file: Path) -> None:
        """Test clearing removes the file once."""
        store = StateStore(state_file)
        store.save(SchedulerStateDocument())

        assert store.clear() is True
        assert store.clear() is False
        assert not state_file.exists()
