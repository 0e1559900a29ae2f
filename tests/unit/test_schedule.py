"""
Unit tests for program-week arithmetic.

These are pure functions, so every test pins "now" explicitly.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from coachroster.core.roster.schedule import (
    FixedClock,
    SystemClock,
    clamp_week,
    elapsed_whole_weeks,
    is_ending_soon,
    resolve_expected_week,
    week_choices,
)


# ---------------------------------------------------------------------------
# Week Resolution Tests
# ---------------------------------------------------------------------------

class TestResolveExpectedWeek:
    """Tests for resolve_expected_week."""

    def test_two_weeks_in_is_week_three(self):
        """Fourteen days after the start the athlete is on week 3."""
        assert resolve_expected_week(date(2024, 1, 1), 6, date(2024, 1, 15)) == 3

    def test_start_day_is_week_one(self):
        """The start date itself is week 1."""
        assert resolve_expected_week(date(2024, 1, 1), 6, date(2024, 1, 1)) == 1

    def test_partial_week_rounds_down(self):
        """Six days in is still week 1."""
        assert resolve_expected_week(date(2024, 1, 1), 6, date(2024, 1, 7)) == 1
        assert resolve_expected_week(date(2024, 1, 1), 6, date(2024, 1, 8)) == 2

    def test_full_program_length_clamps_to_duration(self):
        """Exactly duration weeks in resolves to the last week, not one past it."""
        start = date(2024, 1, 1)
        now = start + timedelta(days=7 * 6)
        assert resolve_expected_week(start, 6, now) == 6

    def test_long_after_program_end_stays_at_duration(self):
        """Months after the end the week stays at the duration."""
        assert resolve_expected_week(date(2023, 1, 1), 4, date(2024, 6, 1)) == 4

    @pytest.mark.parametrize("days", [0, 3, 7, 20, 41, 42, 100])
    def test_result_within_program_when_started(self, days):
        """Any day on or after the start lands inside the program."""
        start = date(2024, 1, 1)
        week = resolve_expected_week(start, 6, start + timedelta(days=days))
        assert 1 <= week <= 6

    def test_future_assignment_is_not_clamped(self):
        """A start date next week gives week 0; callers clamp for display."""
        assert resolve_expected_week(date(2024, 1, 8), 6, date(2024, 1, 1)) == 0

    def test_rejects_zero_duration(self):
        """A zero-week program is an error."""
        with pytest.raises(ValueError, match="at least 1"):
            resolve_expected_week(date(2024, 1, 1), 0, date(2024, 1, 15))

    def test_counts_from_local_midnight(self):
        """A datetime on the seventh day, late evening, is still week 1."""
        tz = ZoneInfo("America/New_York")
        now = datetime(2024, 1, 7, 23, 59, tzinfo=tz)
        assert resolve_expected_week(date(2024, 1, 1), 6, now) == 1
        now = datetime(2024, 1, 8, 0, 0, tzinfo=tz)
        assert resolve_expected_week(date(2024, 1, 1), 6, now) == 2


class TestElapsedWholeWeeks:
    """Tests for elapsed_whole_weeks."""

    def test_floors_negative_spans(self):
        """A span of minus one day floors to minus one week."""
        assert elapsed_whole_weeks(date(2024, 1, 2), date(2024, 1, 1)) == -1

    def test_accepts_naive_datetime(self):
        """A naive datetime is counted by its calendar date."""
        assert elapsed_whole_weeks(date(2024, 1, 1), datetime(2024, 1, 22, 12, 0)) == 3


class TestClampWeek:
    """Tests for clamp_week."""

    def test_clamps_low_and_high(self):
        """Weeks are pulled into 1..duration."""
        assert clamp_week(0, 6) == 1
        assert clamp_week(-3, 6) == 1
        assert clamp_week(9, 6) == 6
        assert clamp_week(4, 6) == 4


# ---------------------------------------------------------------------------
# Ending Soon Tests
# ---------------------------------------------------------------------------

class TestIsEndingSoon:
    """Tests for the ending-soon classifier."""

    @pytest.mark.parametrize(
        "current_week, duration, expected",
        [
            (7, 8, True),
            (8, 8, True),
            (6, 8, False),
            (1, 1, True),
            (1, 2, True),
            (1, 3, False),
            (10, 8, True),
        ],
    )
    def test_final_two_weeks_are_flagged(self, current_week, duration, expected):
        """Only the last two weeks of a program are flagged."""
        assert is_ending_soon(current_week, duration) is expected

    def test_no_program_is_never_ending_soon(self):
        """Without a duration nothing is ending soon."""
        assert is_ending_soon(1, None) is False
        assert is_ending_soon(40, None) is False


# ---------------------------------------------------------------------------
# Week Choices and Clocks
# ---------------------------------------------------------------------------

class TestWeekChoices:
    """Tests for the check-in week selector range."""

    def test_covers_program_duration(self):
        """Choices run from 1 to the program's duration."""
        assert week_choices(8) == [1, 2, 3, 4, 5, 6, 7, 8]

    def test_defaults_to_twelve_without_program(self):
        """Without a program the cap is 12."""
        assert week_choices(None) == list(range(1, 13))

    def test_custom_default_cap(self):
        """The fallback cap can be configured."""
        assert week_choices(None, default_cap=4) == [1, 2, 3, 4]


class TestClocks:
    """Tests for the injectable clocks."""

    def test_fixed_clock_returns_pinned_day(self):
        """FixedClock always reports its pinned date."""
        clock = FixedClock(date(2024, 3, 1))
        assert clock.today() == date(2024, 3, 1)
        assert clock.now() == datetime(2024, 3, 1)

    def test_system_clock_uses_its_timezone(self):
        """SystemClock reports time in its configured zone."""
        clock = SystemClock(timezone(timedelta(hours=14)))
        assert clock.now().utcoffset() == timedelta(hours=14)
        assert clock.today() == clock.now().date()

    def test_system_clock_defaults_to_utc(self):
        """SystemClock falls back to UTC."""
        assert SystemClock().now().tzinfo is timezone.utc
