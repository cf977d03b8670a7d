"""Parsed cron expression."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CronTime:
    """Concrete value sets for the six calendar fields.

    Every tuple is non-empty, strictly ascending and inside its field's
    domain. Day of week counts from 0 (Sunday) to 6 (Saturday).
    """

    second: tuple[int, ...]
    minute: tuple[int, ...]
    hour: tuple[int, ...]
    day_of_month: tuple[int, ...]
    month: tuple[int, ...]
    day_of_week: tuple[int, ...]

    @property
    def day_of_month_restricted(self) -> bool:
        """True unless the field covers every day 1-31."""
        return len(self.day_of_month) < 31

    @property
    def day_of_week_restricted(self) -> bool:
        """True unless the field covers every weekday."""
        return len(self.day_of_week) < 7

    def to_dict(self) -> dict[str, list[int]]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "second": list(self.second),
            "minute": list(self.minute),
            "hour": list(self.hour),
            "day_of_month": list(self.day_of_month),
            "month": list(self.month),
            "day_of_week": list(self.day_of_week),
        }
