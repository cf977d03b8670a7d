"""Tests for next/previous occurrence calculation."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from cronloom.engine.errors import NoMatchError
from cronloom.engine.occurrence import day_matches, next_occurrence, previous_occurrence
from cronloom.engine.parser import CronParser, parse_expression


def next_of(expr: str, after: datetime) -> datetime:
    return next_occurrence(parse_expression(expr), after, expr)


def previous_of(expr: str, before: datetime) -> datetime:
    return previous_occurrence(parse_expression(expr), before, expr)


class TestNextOccurrence:
    """Tests for next_occurrence."""

    def test_next_day(self) -> None:
        """Test a daily expression after midday."""
        assert next_of("@daily", datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 2)

    def test_strictly_after(self) -> None:
        """Test a reference on a match returns the following match."""
        ref = datetime(2024, 3, 10, 9, 30)
        assert next_of("0 30 9 * * *", ref) == datetime(2024, 3, 11, 9, 30)

    def test_sub_second_reference(self) -> None:
        """Test fractional seconds round up to the next whole second."""
        ref = datetime(2024, 1, 1, 12, 0, 0, 500_000)
        assert next_of("* * * * * *", ref) == datetime(2024, 1, 1, 12, 0, 1)

    def test_at_preset(self) -> None:
        """Test @at results land exactly on the configured time."""
        result = next_of("@at_14:30", datetime(2024, 5, 20, 15, 0))
        assert result == datetime(2024, 5, 21, 14, 30, 0)

    def test_step_minutes(self) -> None:
        """Test a stepped minute field."""
        result = next_of("0 */15 * * * *", datetime(2024, 1, 1, 10, 7, 12))
        assert result == datetime(2024, 1, 1, 10, 15)

    def test_month_end_carry(self) -> None:
        """Test carrying past the last day of a month."""
        result = next_of("0 0 12 * * *", datetime(2024, 1, 31, 13, 0))
        assert result == datetime(2024, 2, 1, 12, 0)

    def test_year_carry(self) -> None:
        """Test carrying into the next year."""
        result = next_of("0 0 0 1 1 *", datetime(2024, 6, 15))
        assert result == datetime(2025, 1, 1)

    def test_leap_day(self) -> None:
        """Test Feb 29 is found in the next leap year."""
        result = next_of("0 0 0 29 2 *", datetime(2024, 3, 1))
        assert result == datetime(2028, 2, 29)

    def test_short_month_skipped(self) -> None:
        """Test day 31 skips months without one."""
        result = next_of("0 0 0 31 * *", datetime(2024, 4, 1))
        assert result == datetime(2024, 5, 31)

    def test_day_of_week_only(self) -> None:
        """Test a weekday restriction on its own."""
        # 2024-09-01 is a Sunday
        assert next_of("@on_monday", datetime(2024, 9, 1)) == datetime(2024, 9, 2)

    def test_day_union(self) -> None:
        """Test day-of-month and day-of-week restrictions combine as a union."""
        # The 13th of September 2024 is a Friday; the 6th is the first Friday
        result = next_of("0 0 0 13 * 5", datetime(2024, 9, 1))
        assert result == datetime(2024, 9, 6)

    def test_impossible_date(self) -> None:
        """Test an expression that never matches."""
        with pytest.raises(NoMatchError, match="No matching time for '0 0 0 30 2 \\*'"):
            next_of("0 0 0 30 2 *", datetime(2024, 1, 1))

    def test_timezone_preserved(self) -> None:
        """Test aware references keep their tzinfo."""
        zone = ZoneInfo("UTC")
        result = next_of("@hourly", datetime(2024, 1, 1, 10, 30, tzinfo=zone))
        assert result == datetime(2024, 1, 1, 11, 0, tzinfo=zone)
        assert result.tzinfo is zone


class TestPreviousOccurrence:
    """Tests for previous_occurrence."""

    def test_strictly_before(self) -> None:
        """Test a reference on a match returns the earlier match."""
        assert previous_of("@daily", datetime(2024, 1, 2)) == datetime(2024, 1, 1)

    def test_sub_second_reference(self) -> None:
        """Test fractional seconds truncate to the current second."""
        ref = datetime(2024, 1, 1, 12, 0, 0, 500_000)
        assert previous_of("* * * * * *", ref) == datetime(2024, 1, 1, 12, 0, 0)

    def test_year_carry(self) -> None:
        """Test carrying into the previous year."""
        assert previous_of("0 0 0 1 1 *", datetime(2024, 1, 1)) == datetime(2023, 1, 1)

    def test_latest_time_of_day(self) -> None:
        """Test the latest matching time on an earlier day."""
        result = previous_of("0 30 9,17 * * *", datetime(2024, 1, 2, 8, 0))
        assert result == datetime(2024, 1, 1, 17, 30)

    def test_month_start_carry(self) -> None:
        """Test carrying back over the start of a month."""
        result = previous_of("0 0 0 31 * *", datetime(2024, 5, 1))
        assert result == datetime(2024, 3, 31)

    def test_impossible_date(self) -> None:
        """Test an expression that never matches."""
        with pytest.raises(NoMatchError, match="before"):
            previous_of("0 0 0 31 2 *", datetime(2024, 1, 1))


class TestOrdering:
    """Properties that hold for any expression and reference."""

    @pytest.mark.parametrize(
        "expr",
        [
            "* * * * * *",
            "0 */5 * * * *",
            "@hourly",
            "@weekly",
            "0 0 9-17 * * 1-5",
            "30 15 10 1,15 * *",
            "0 0 0 13 * 5",
            "@yearly",
        ],
    )
    def test_next_after_previous_before(self, expr: str) -> None:
        """Test next > ref > previous and that nothing matches in between."""
        ref = datetime(2024, 7, 4, 12, 34, 56, 250_000)
        following = next_of(expr, ref)
        preceding = previous_of(expr, ref)

        assert preceding < ref < following
        assert next_of(expr, preceding) == following
        assert previous_of(expr, following) == preceding

    def test_deterministic(self) -> None:
        """Test repeated calls give the same answer."""
        ref = datetime(2024, 2, 28, 23, 59, 59)
        assert next_of("@daily", ref) == next_of("@daily", ref)

    def test_sequence_is_increasing(self) -> None:
        """Test walking forward produces strictly increasing times."""
        current = datetime(2024, 1, 1)
        seen = []
        for _ in range(20):
            current = next_of("0 */20 * * * *", current)
            seen.append(current)
        assert seen == sorted(set(seen))
        assert seen[1] - seen[0] == timedelta(minutes=20)


class TestDayMatches:
    """Tests for day_matches."""

    def test_unrestricted(self) -> None:
        """Test every day matches when neither field is restricted."""
        assert day_matches(parse_expression("@daily"), 2024, 9, 3)

    def test_weekday_numbering(self) -> None:
        """Test 0 is Sunday."""
        cron_time = parse_expression("0 0 0 * * 0")
        assert day_matches(cron_time, 2024, 9, 1)
        assert not day_matches(cron_time, 2024, 9, 2)


class TestCronParser:
    """Tests for CronParser."""

    def test_parse_cached(self) -> None:
        """Test parse returns the same CronTime each time."""
        parser = CronParser("@hourly")
        assert parser.parse() is parser.parse()

    def test_defaults_to_now(self) -> None:
        """Test omitted references use the current time."""
        parser = CronParser("* * * * * *")
        before = datetime.now()
        assert parser.get_next() > before
        assert parser.get_previous() <= datetime.now()

    def test_timezone(self) -> None:
        """Test the parser zone is applied to now()."""
        parser = CronParser("@hourly", ZoneInfo("UTC"))
        assert parser.get_next().tzinfo == ZoneInfo("UTC")
