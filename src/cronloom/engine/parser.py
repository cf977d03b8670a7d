"""Cron expression parser for cronloom."""

from __future__ import annotations

from datetime import datetime, tzinfo

from cronloom.models import CronTime

from .fields import FIELD_SPECS, parse_field
from .occurrence import next_occurrence, previous_occurrence
from .presets import normalize_expression


def parse_expression(expression: str) -> CronTime:
    """Normalize and parse an expression into its six value sets.

    Args:
        expression: A six-field cron string or an ``@`` preset.

    Returns:
        Parsed CronTime.

    Raises:
        ExpressionError: If the expression or one of its fields is malformed.
    """
    normalized = normalize_expression(expression)
    values = [parse_field(text, spec) for text, spec in zip(normalized.split(), FIELD_SPECS)]
    return CronTime(*values)


class CronParser:
    """Parses an expression once and answers occurrence queries against it."""

    def __init__(self, expression: str, timezone: tzinfo | None = None) -> None:
        """Initialize the parser.

        Args:
            expression: A six-field cron string or an ``@`` preset.
            timezone: Zone used when no reference instant is given.
                Local naive time when None.

        Raises:
            ExpressionError: If the expression is malformed.
        """
        self.expression = expression
        self.timezone = timezone
        self._cron_time = parse_expression(expression)

    def parse(self) -> CronTime:
        """Return the parsed value sets."""
        return self._cron_time

    def now(self) -> datetime:
        """Current time in the parser's zone."""
        return datetime.now(self.timezone)

    def get_next(self, after: datetime | None = None) -> datetime:
        """Next occurrence strictly after ``after`` (default: now).

        Raises:
            NoMatchError: If the expression never matches.
        """
        return next_occurrence(self._cron_time, after or self.now(), self.expression)

    def get_previous(self, before: datetime | None = None) -> datetime:
        """Previous occurrence strictly before ``before`` (default: now).

        Raises:
            NoMatchError: If the expression never matches.
        """
        return previous_occurrence(self._cron_time, before or self.now(), self.expression)
