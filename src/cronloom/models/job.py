"""Job definition, status and execution bookkeeping models."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """Lifecycle status of a scheduled job."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    ERROR = "error"  # Too many consecutive failures, see CronJob


class ExecutionRecord(BaseModel):
    """Outcome of a single callback invocation."""

    started_at: datetime = Field(..., description="When the callback was invoked")
    duration_ms: float = Field(..., ge=0, description="Wall time spent in the callback")
    succeeded: bool = Field(..., description="Whether the callback completed without error")
    error_message: str | None = Field(default=None, description="Failure message, if any")


class JobMetrics(BaseModel):
    """Counters and timings accumulated since the last reset."""

    total_executions: int = Field(default=0, ge=0)
    success_count: int = Field(default=0, ge=0)
    failure_count: int = Field(default=0, ge=0)
    consecutive_failures: int = Field(default=0, ge=0)
    average_duration_ms: float = Field(default=0.0, ge=0)
    last_duration_ms: float | None = None
    last_error_message: str | None = None

    def record(self, duration_ms: float, error_message: str | None = None) -> None:
        """Fold one completed execution into the counters.

        The average is a running mean over every execution since the last
        reset, so it stays exact after history entries are evicted.
        """
        self.total_executions += 1
        self.last_duration_ms = duration_ms
        self.average_duration_ms += (duration_ms - self.average_duration_ms) / self.total_executions

        if error_message is None:
            self.success_count += 1
            self.consecutive_failures = 0
        else:
            self.failure_count += 1
            self.consecutive_failures += 1
            self.last_error_message = error_message


class JobDefinition(BaseModel):
    """Everything needed to construct a job, minus scheduler-wide options."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Unique job name")
    cron: str = Field(..., description="Six-field cron expression or preset")
    callback: Callable[[], Any] = Field(..., description="Sync or async job body")
    on_tick: Callable[[], Any] | None = Field(
        default=None, description="Called after each successful execution"
    )
    on_complete: Callable[[], Any] | None = Field(
        default=None, description="Called once when the job is destroyed"
    )
    on_error: Callable[[BaseException], Any] | None = Field(
        default=None, description="Called with the error of each failed execution"
    )
    priority: int = Field(default=0, description="Ordering hint, never preempts a timer")
    max_history: int | None = Field(
        default=None, ge=1, description="History cap (scheduler default when unset)"
    )
    start: bool = Field(default=False, description="Start immediately after construction")
