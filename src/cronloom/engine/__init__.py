"""cronloom scheduling engine."""

from .errors import (
    CronloomError,
    ErrorCategory,
    ExpressionError,
    JobConfigError,
    JobExecutionError,
    NoMatchError,
    PresetBoundsError,
    SchedulerError,
    StateError,
)
from .fields import FIELD_SPECS, FieldSpec, parse_field
from .job import CronJob
from .occurrence import SEARCH_YEARS, day_matches, next_occurrence, previous_occurrence
from .parser import CronParser, parse_expression
from .presets import NAMED_PRESETS, normalize_expression
from .strategies import (
    CalculatedTimeoutStrategy,
    PollingStrategy,
    TimerStrategy,
    seconds_until,
)

__all__ = [
    "FIELD_SPECS",
    "NAMED_PRESETS",
    "SEARCH_YEARS",
    "CalculatedTimeoutStrategy",
    "CronJob",
    "CronParser",
    "CronloomError",
    "ErrorCategory",
    "ExpressionError",
    "FieldSpec",
    "JobConfigError",
    "JobExecutionError",
    "NoMatchError",
    "PollingStrategy",
    "PresetBoundsError",
    "SchedulerError",
    "StateError",
    "TimerStrategy",
    "day_matches",
    "next_occurrence",
    "normalize_expression",
    "parse_expression",
    "parse_field",
    "previous_occurrence",
    "seconds_until",
]
