"""Next and previous occurrence calculation for parsed cron expressions.

The search walks the calendar fields from coarsest (month) to finest
(second). Whenever a field has to move, every finer field is reset to its
extremum (minimum going forward, maximum going backward) and the walk starts
over from the month. The year only changes through month or day carry.
"""

from __future__ import annotations

import calendar
from bisect import bisect_left, bisect_right
from datetime import date, datetime, timedelta

from cronloom.models import CronTime

from .errors import NoMatchError

# Calendar years searched before giving up on an expression
SEARCH_YEARS = 5


def next_occurrence(
    cron_time: CronTime,
    after: datetime,
    expression: str | None = None,
) -> datetime:
    """Find the first matching instant strictly after ``after``.

    Args:
        cron_time: Parsed expression.
        after: Reference instant. Naive or aware; tzinfo is carried over.
        expression: Original expression, used in error messages.

    Returns:
        Matching datetime with microsecond 0.

    Raises:
        NoMatchError: If nothing matches within SEARCH_YEARS years.
    """
    start = after.replace(microsecond=0) + timedelta(seconds=1)
    year, month, day = start.year, start.month, start.day
    hour, minute, second = start.hour, start.minute, start.second
    last_year = year + SEARCH_YEARS

    while year <= last_year:
        if month not in cron_time.month:
            found = _first_at_least(cron_time.month, month)
            if found is None:
                year += 1
                month = cron_time.month[0]
            else:
                month = found
            day, hour, minute, second = 1, 0, 0, 0
            continue

        found = _next_matching_day(cron_time, year, month, day)
        if found is None:
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
            day, hour, minute, second = 1, 0, 0, 0
            continue
        if found != day:
            day, hour, minute, second = found, 0, 0, 0

        found = _first_at_least(cron_time.hour, hour)
        if found is None:
            day, hour, minute, second = day + 1, 0, 0, 0
            continue
        if found != hour:
            hour, minute, second = found, 0, 0

        found = _first_at_least(cron_time.minute, minute)
        if found is None:
            hour, minute, second = hour + 1, 0, 0
            continue
        if found != minute:
            minute, second = found, 0

        found = _first_at_least(cron_time.second, second)
        if found is None:
            minute, second = minute + 1, 0
            continue

        return datetime(year, month, day, hour, minute, found, tzinfo=after.tzinfo)

    raise NoMatchError(_no_match_message(expression, "after", after), expression)


def previous_occurrence(
    cron_time: CronTime,
    before: datetime,
    expression: str | None = None,
) -> datetime:
    """Find the last matching instant strictly before ``before``.

    Args:
        cron_time: Parsed expression.
        before: Reference instant. Naive or aware; tzinfo is carried over.
        expression: Original expression, used in error messages.

    Returns:
        Matching datetime with microsecond 0.

    Raises:
        NoMatchError: If nothing matches within SEARCH_YEARS years.
    """
    start = before.replace(microsecond=0)
    if before.microsecond == 0:
        start -= timedelta(seconds=1)
    year, month, day = start.year, start.month, start.day
    hour, minute, second = start.hour, start.minute, start.second
    first_year = year - SEARCH_YEARS

    while year >= first_year:
        if month not in cron_time.month:
            found = _last_at_most(cron_time.month, month)
            if found is None:
                year -= 1
                month = cron_time.month[-1]
            else:
                month = found
            day, hour, minute, second = _days_in_month(year, month), 23, 59, 59
            continue

        found = _previous_matching_day(cron_time, year, month, day)
        if found is None:
            year, month = (year - 1, 12) if month == 1 else (year, month - 1)
            day, hour, minute, second = _days_in_month(year, month), 23, 59, 59
            continue
        if found != day:
            day, hour, minute, second = found, 23, 59, 59

        found = _last_at_most(cron_time.hour, hour)
        if found is None:
            day, hour, minute, second = day - 1, 23, 59, 59
            continue
        if found != hour:
            hour, minute, second = found, 59, 59

        found = _last_at_most(cron_time.minute, minute)
        if found is None:
            hour, minute, second = hour - 1, 59, 59
            continue
        if found != minute:
            minute, second = found, 59

        found = _last_at_most(cron_time.second, second)
        if found is None:
            minute, second = minute - 1, 59
            continue

        return datetime(year, month, day, hour, minute, found, tzinfo=before.tzinfo)

    raise NoMatchError(_no_match_message(expression, "before", before), expression)


def day_matches(cron_time: CronTime, year: int, month: int, day: int) -> bool:
    """Check a calendar day against the day-of-month and day-of-week fields.

    When both fields are restricted a day matching either one is accepted.
    When only one is restricted it alone decides.
    """
    dom_restricted = cron_time.day_of_month_restricted
    dow_restricted = cron_time.day_of_week_restricted
    if not dom_restricted and not dow_restricted:
        return True

    in_dom = day in cron_time.day_of_month
    # date.weekday() counts from Monday; cron counts from Sunday
    in_dow = (date(year, month, day).weekday() + 1) % 7 in cron_time.day_of_week

    if dom_restricted and dow_restricted:
        return in_dom or in_dow
    return in_dom if dom_restricted else in_dow


def _next_matching_day(cron_time: CronTime, year: int, month: int, day: int) -> int | None:
    """First matching day >= ``day`` that exists in the month."""
    for candidate in range(day, _days_in_month(year, month) + 1):
        if day_matches(cron_time, year, month, candidate):
            return candidate
    return None


def _previous_matching_day(cron_time: CronTime, year: int, month: int, day: int) -> int | None:
    """Last matching day <= ``day`` that exists in the month."""
    for candidate in range(min(day, _days_in_month(year, month)), 0, -1):
        if day_matches(cron_time, year, month, candidate):
            return candidate
    return None


def _first_at_least(values: tuple[int, ...], value: int) -> int | None:
    index = bisect_left(values, value)
    return values[index] if index < len(values) else None


def _last_at_most(values: tuple[int, ...], value: int) -> int | None:
    index = bisect_right(values, value)
    return values[index - 1] if index > 0 else None


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _no_match_message(expression: str | None, direction: str, reference: datetime) -> str:
    label = f"'{expression}'" if expression else "expression"
    return (
        f"No matching time for {label} within {SEARCH_YEARS} years "
        f"{direction} {reference.isoformat()}"
    )
