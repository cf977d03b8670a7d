"""Error types for cronloom scheduling."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Classification of errors by the phase that raised them."""

    CONFIGURATION = "configuration"  # Raised at construction, job never schedulable
    SCHEDULE = "schedule"  # Raised while computing or arming the next run
    EXECUTION = "execution"  # Callback failures, always recovered locally
    PERSISTENCE = "persistence"  # Reading or writing the state document


@dataclass
class CronloomError(Exception):
    """Base error with classification and context."""

    message: str
    category: ErrorCategory
    job_name: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class ExpressionError(CronloomError):
    """Malformed cron expression or field."""

    def __init__(self, message: str, expression: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            context={"expression": expression} if expression is not None else {},
        )

    @property
    def expression(self) -> str | None:
        return self.context.get("expression")


@dataclass
class PresetBoundsError(ExpressionError):
    """Numeric parameter of a custom preset is out of bounds."""

    def __init__(self, message: str, expression: str | None = None) -> None:
        super().__init__(message, expression)


@dataclass
class JobConfigError(CronloomError):
    """Invalid job definition (name, duplicate, options)."""

    def __init__(self, message: str, job_name: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            job_name=job_name,
        )


@dataclass
class NoMatchError(CronloomError):
    """Raised when an expression has no occurrence within the search window."""

    def __init__(self, message: str, expression: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.SCHEDULE,
            context={"expression": expression} if expression is not None else {},
        )


@dataclass
class SchedulerError(CronloomError):
    """Timer could not be armed."""

    def __init__(self, message: str, job_name: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.SCHEDULE,
            job_name=job_name,
        )


@dataclass
class JobExecutionError(CronloomError):
    """A job callback failed with something that is not an Exception instance."""

    def __init__(self, message: str, job_name: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.EXECUTION,
            job_name=job_name,
        )


@dataclass
class StateError(CronloomError):
    """The persisted state document could not be read or written."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.PERSISTENCE,
            context={"path": path} if path is not None else {},
        )
