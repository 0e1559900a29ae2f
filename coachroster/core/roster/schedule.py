"""
Program-week arithmetic.

Everything here is a pure function of its inputs. "Now" is always passed
in explicitly (or read through a Clock the caller owns) so the week maths
can be tested against fixed dates.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Protocol, Union

ONE_WEEK = timedelta(weeks=1)

# Week cap used when an athlete has no program to count against.
DEFAULT_WEEK_CAP = 12


# ---------------------------------------------------------------------------
# Clocks
# ---------------------------------------------------------------------------

class Clock(Protocol):
    """
    Source of "today" for services.

    Services take a Clock instead of calling date.today() so tests can pin
    the date and so the local timezone is decided in one place.
    """

    def today(self) -> date: ...

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in a fixed local timezone."""

    def __init__(self, tz: Optional[tzinfo] = None) -> None:
        self._tz = tz or timezone.utc

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given day. Used in tests and scripts."""

    def __init__(self, today: date) -> None:
        self._today = today

    def now(self) -> datetime:
        return datetime.combine(self._today, time.min)

    def today(self) -> date:
        return self._today


# ---------------------------------------------------------------------------
# Week resolution
# ---------------------------------------------------------------------------

def elapsed_whole_weeks(assigned_date: date, now: Union[date, datetime]) -> int:
    """
    Whole weeks between local midnight of assigned_date and now.

    Floors towards negative infinity, so a future assignment gives a
    negative count rather than zero.
    """
    if isinstance(now, datetime):
        start = datetime.combine(assigned_date, time.min, tzinfo=now.tzinfo)
        return (now - start) // ONE_WEEK
    return (now - assigned_date) // ONE_WEEK


def resolve_expected_week(
    assigned_date: date,
    duration: int,
    now: Union[date, datetime],
) -> int:
    """
    The week an athlete should be on, given when they started.

    Returns min(elapsed_whole_weeks + 1, duration). The upper bound is
    clamped to the program length; the lower bound is not, so an
    assignment dated in the future yields a value below 1. Use clamp_week
    where a displayable week is needed.
    """
    if duration < 1:
        raise ValueError("duration must be at least 1")
    return min(elapsed_whole_weeks(assigned_date, now) + 1, duration)


def clamp_week(week: int, duration: int) -> int:
    """Clamp a week number into [1, duration]."""
    return max(1, min(week, duration))


def is_ending_soon(current_week: int, duration: Optional[int]) -> bool:
    """
    True when an athlete is on the final or second-to-final week.

    Athletes without a program are never flagged: with no duration the
    raw rule (current_week >= duration - 1) would be true for everyone.
    """
    if not duration:
        return False
    return current_week >= duration - 1


def week_choices(duration: Optional[int], default_cap: int = DEFAULT_WEEK_CAP) -> list[int]:
    """Weeks an athlete may pick when correcting their check-in."""
    return list(range(1, (duration or default_cap) + 1))
