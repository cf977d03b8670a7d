"""cronloom data models."""

from .config import MAX_TIMEOUT_SECONDS, PersistenceOptions, SchedulerConfig
from .cron import CronTime
from .job import ExecutionRecord, JobDefinition, JobMetrics, JobStatus
from .state import JobSnapshot, SchedulerStateDocument

__all__ = [
    "MAX_TIMEOUT_SECONDS",
    "CronTime",
    "ExecutionRecord",
    "JobDefinition",
    "JobMetrics",
    "JobSnapshot",
    "JobStatus",
    "PersistenceOptions",
    "SchedulerConfig",
    "SchedulerStateDocument",
]
