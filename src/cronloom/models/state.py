"""Serializable snapshots of scheduler state."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .config import SchedulerConfig
from .job import ExecutionRecord, JobMetrics, JobStatus


class JobSnapshot(BaseModel):
    """Persisted view of one job. Callbacks are never included."""

    name: str = Field(..., min_length=1)
    cron: str = Field(..., min_length=1)
    status: JobStatus = JobStatus.STOPPED
    priority: int = 0
    metrics: JobMetrics | None = None
    history: list[ExecutionRecord] | None = None


class SchedulerStateDocument(BaseModel):
    """Top-level state document written by the state store."""

    timestamp: datetime = Field(default_factory=datetime.now)
    jobs: list[JobSnapshot] = Field(default_factory=list)
    config: SchedulerConfig = Field(default_factory=SchedulerConfig)
