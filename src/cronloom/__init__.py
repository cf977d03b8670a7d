"""cronloom: in-process cron job scheduling on asyncio."""

from cronloom.engine import (
    CronJob,
    CronloomError,
    CronParser,
    ExpressionError,
    JobConfigError,
    NoMatchError,
    PresetBoundsError,
    SchedulerError,
    StateError,
)
from cronloom.models import (
    CronTime,
    ExecutionRecord,
    JobDefinition,
    JobMetrics,
    JobStatus,
    PersistenceOptions,
    SchedulerConfig,
)
from cronloom.scheduler import SchedulerService

__version__ = "0.1.0"

__all__ = [
    "CronJob",
    "CronParser",
    "CronTime",
    "CronloomError",
    "ExecutionRecord",
    "ExpressionError",
    "JobConfigError",
    "JobDefinition",
    "JobMetrics",
    "JobStatus",
    "NoMatchError",
    "PersistenceOptions",
    "PresetBoundsError",
    "SchedulerConfig",
    "SchedulerError",
    "SchedulerService",
    "StateError",
    "__version__",
]
