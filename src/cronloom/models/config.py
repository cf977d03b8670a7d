"""Scheduler-wide configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field

# Largest delay a single-shot timer is trusted with (2**31 - 1 milliseconds).
MAX_TIMEOUT_SECONDS = 2_147_483.647


class SchedulerConfig(BaseModel):
    """Defaults applied to every job a scheduler creates."""

    polling_interval: float = Field(
        default=1.0, gt=0, description="Seconds between checks in polling mode"
    )
    use_calculated_timeouts: bool = Field(
        default=True, description="Arm one timer per occurrence instead of polling"
    )
    max_history_entries: int = Field(default=100, ge=1, description="Per-job history cap")
    max_timeout: float = Field(
        default=MAX_TIMEOUT_SECONDS,
        gt=0,
        description="Longest single-shot delay before falling back to polling",
    )
    max_consecutive_failures: int | None = Field(
        default=None,
        ge=1,
        description="Failures in a row before a job enters the error state (off when unset)",
    )
    timezone: str | None = Field(
        default=None, description="IANA zone for schedules (local time when unset)"
    )


class PersistenceOptions(BaseModel):
    """Where and whether scheduler state is saved."""

    enabled: bool = Field(default=False, description="Save state on every change")
    file_path: str = Field(
        default="./cronloom-state.json", description="Location of the state document"
    )
    auto_restore: bool = Field(default=True, description="Restore jobs when the scheduler starts")
