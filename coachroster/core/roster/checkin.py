"""
Athlete self check-in.

The check-in is a small state machine:

    UNSELECTED -> PROPOSED -> CONFIRMED
                     |            ^
                     v            |
                 ADJUSTING -------+

Picking an athlete proposes the week they should be on. They either
accept it or reject it and pick a week themselves. Only a successful
write moves the flow to CONFIRMED.
"""

import logging
from datetime import date
from enum import Enum
from typing import Optional, Protocol

from .errors import RosterValidationError
from .models import Athlete
from .schedule import DEFAULT_WEEK_CAP, Clock, clamp_week, resolve_expected_week, week_choices

logger = logging.getLogger(__name__)


class CheckInState(Enum):
    UNSELECTED = "unselected"
    PROPOSED = "proposed"
    ADJUSTING = "adjusting"
    CONFIRMED = "confirmed"


class CheckInRecorder(Protocol):
    """Anything that can persist a check-in. RosterService is one."""

    async def record_checkin(self, athlete_id: str, week: int) -> Athlete: ...


def propose_week(
    athlete: Athlete,
    today: date,
    default_week_cap: int = DEFAULT_WEEK_CAP,
) -> int:
    """
    The week to suggest when an athlete checks in.

    Counts from the assignment date, capped at the program duration (or
    default_week_cap without a program) and never below week 1. An
    athlete with no start date is offered the week they last reported.
    """
    cap = athlete.program_duration or default_week_cap
    if athlete.assigned_date is None:
        return clamp_week(athlete.current_week, cap)
    return clamp_week(resolve_expected_week(athlete.assigned_date, cap, today), cap)


class CheckInFlow:
    """
    One visit to the check-in page.

    Owns the selected athlete, the proposal, and the override week.
    Failed writes leave the state where it was so the athlete can retry.
    """

    def __init__(
        self,
        recorder: CheckInRecorder,
        clock: Clock,
        default_week_cap: int = DEFAULT_WEEK_CAP,
    ) -> None:
        self._recorder = recorder
        self._clock = clock
        self._default_week_cap = default_week_cap
        self.state = CheckInState.UNSELECTED
        self.athlete: Optional[Athlete] = None
        self.proposed_week: Optional[int] = None
        self.override_week: Optional[int] = None
        self.confirmed_week: Optional[int] = None

    @property
    def week_choices(self) -> list[int]:
        """Weeks the override selector offers for the selected athlete."""
        duration = self.athlete.program_duration if self.athlete else None
        return week_choices(duration, self._default_week_cap)

    def select(self, athlete: Optional[Athlete]) -> None:
        """Pick (or clear) the athlete. Always starts the visit over."""
        self.athlete = athlete
        self.override_week = None
        self.confirmed_week = None
        if athlete is None:
            self.proposed_week = None
            self.state = CheckInState.UNSELECTED
            return
        self.proposed_week = propose_week(athlete, self._clock.today(), self._default_week_cap)
        self.state = CheckInState.PROPOSED

    def reject(self) -> None:
        """The proposal is wrong; let the athlete pick a week."""
        self._require(CheckInState.PROPOSED, CheckInState.ADJUSTING)
        self.override_week = self.override_week or 1
        self.state = CheckInState.ADJUSTING

    def choose_week(self, week: int) -> None:
        self._require(CheckInState.ADJUSTING)
        if week not in self.week_choices:
            raise RosterValidationError(
                f"Week must be between 1 and {self.week_choices[-1]}"
            )
        self.override_week = week

    async def accept(self) -> Athlete:
        """Confirm the proposed week."""
        self._require(CheckInState.PROPOSED, CheckInState.ADJUSTING)
        return await self._commit(self.proposed_week)

    async def submit(self) -> Athlete:
        """Confirm the week picked in the override selector."""
        self._require(CheckInState.ADJUSTING)
        return await self._commit(self.override_week)

    async def _commit(self, week: int) -> Athlete:
        try:
            updated = await self._recorder.record_checkin(self.athlete.id, week)
        except Exception as e:
            logger.warning(
                "Check-in not saved",
                extra={"athlete_id": self.athlete.id, "week": week, "error": str(e)},
            )
            raise
        self.athlete = updated
        self.confirmed_week = week
        self.state = CheckInState.CONFIRMED
        return updated

    def _require(self, *states: CheckInState) -> None:
        if self.state not in states:
            raise RosterValidationError(
                f"Cannot do that while check-in is {self.state.value}"
            )
