"""
Unit tests for the athlete check-in flow.
"""

import asyncio
from datetime import date

import pytest

from coachroster.core.roster.checkin import CheckInFlow, CheckInState, propose_week
from coachroster.core.roster.errors import RosterStoreError, RosterValidationError
from coachroster.core.roster.models import Athlete, ProgramRef


def _athlete(**overrides) -> Athlete:
    fields = dict(
        id="a1",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        current_week=2,
        assigned_date=date(2024, 3, 1),
        program_id="p1",
        program=ProgramRef("p1", "Base Building", 8),
    )
    fields.update(overrides)
    return Athlete(**fields)


# ---------------------------------------------------------------------------
# Proposal Tests
# ---------------------------------------------------------------------------

class TestProposeWeek:
    """Tests for the proposed check-in week."""

    def test_three_weeks_in_proposes_week_four(self):
        """Three weeks after the start the proposal is week 4."""
        assert propose_week(_athlete(), date(2024, 3, 22)) == 4

    def test_capped_at_program_duration(self):
        """The proposal never passes the program's last week."""
        assert propose_week(_athlete(), date(2025, 1, 1)) == 8

    def test_future_start_proposes_week_one(self):
        """A start date in the future proposes week 1."""
        assert propose_week(_athlete(), date(2024, 2, 1)) == 1

    def test_without_start_date_offers_last_reported_week(self):
        """With no start date the last reported week is offered."""
        athlete = _athlete(program_id=None, program=None, assigned_date=None, current_week=5)
        assert propose_week(athlete, date(2024, 3, 22)) == 5

    def test_without_program_caps_at_default(self):
        """Without a program the proposal is capped at the default."""
        athlete = _athlete(program_id=None, program=None, assigned_date=date(2023, 1, 1))
        assert propose_week(athlete, date(2024, 3, 22)) == 12
        assert propose_week(athlete, date(2024, 3, 22), default_week_cap=6) == 6


# ---------------------------------------------------------------------------
# State Machine Tests
# ---------------------------------------------------------------------------

class TestCheckInFlow:
    """Tests for the check-in state machine against the real service."""

    @pytest.fixture
    def flow(self, service, clock) -> CheckInFlow:
        return CheckInFlow(service, clock)

    @pytest.fixture
    def ada(self, service) -> Athlete:
        return asyncio.run(service.get_athlete("a1"))

    def test_starts_unselected(self, flow):
        """A new flow has no athlete and no proposal."""
        assert flow.state is CheckInState.UNSELECTED
        assert flow.proposed_week is None

    def test_selecting_proposes_week(self, flow, ada):
        """Selecting an athlete moves to PROPOSED with the expected week."""
        flow.select(ada)

        assert flow.state is CheckInState.PROPOSED
        assert flow.proposed_week == 4
        assert flow.week_choices == list(range(1, 9))

    def test_accept_persists_proposal_and_today(self, flow, ada, connection, clock):
        """Accepting stores the proposed week and today's date."""
        flow.select(ada)

        updated = asyncio.run(flow.accept())

        assert flow.state is CheckInState.CONFIRMED
        assert flow.confirmed_week == 4
        assert updated.current_week == 4
        stored = connection._get_athlete("a1")
        assert stored["current_week"] == 4
        assert stored["last_checkin"] == clock.today()

    def test_reject_then_choose_week(self, flow, ada, connection):
        """Rejecting opens the selector and submit stores the chosen week."""
        flow.select(ada)
        flow.reject()

        assert flow.state is CheckInState.ADJUSTING
        assert flow.override_week == 1

        flow.choose_week(2)
        asyncio.run(flow.submit())

        assert flow.state is CheckInState.CONFIRMED
        assert connection._get_athlete("a1")["current_week"] == 2

    def test_accept_still_possible_while_adjusting(self, flow, ada, connection):
        """The proposal can still be accepted after rejecting it."""
        flow.select(ada)
        flow.reject()

        asyncio.run(flow.accept())

        assert connection._get_athlete("a1")["current_week"] == 4

    def test_choose_week_outside_program_is_rejected(self, flow, ada):
        """A week past the program is refused and the choice is kept."""
        flow.select(ada)
        flow.reject()

        with pytest.raises(RosterValidationError, match="between 1 and 8"):
            flow.choose_week(9)
        assert flow.override_week == 1

    def test_cannot_submit_before_rejecting(self, flow, ada):
        """submit is only valid while adjusting."""
        flow.select(ada)
        with pytest.raises(RosterValidationError, match="proposed"):
            asyncio.run(flow.submit())

    def test_cannot_accept_without_athlete(self, flow):
        """accept needs a selected athlete."""
        with pytest.raises(RosterValidationError, match="unselected"):
            asyncio.run(flow.accept())

    def test_failed_write_leaves_state_unchanged(self, flow, ada, connection):
        """A store failure keeps the flow where it was."""
        connection._fail_writes_for("a1")
        flow.select(ada)

        with pytest.raises(RosterStoreError):
            asyncio.run(flow.accept())

        assert flow.state is CheckInState.PROPOSED
        assert flow.confirmed_week is None
        assert connection._get_athlete("a1")["current_week"] == 3

    def test_selecting_another_athlete_starts_over(self, flow, ada, service):
        """Picking a different athlete discards the override."""
        flow.select(ada)
        flow.reject()
        flow.choose_week(6)

        flow.select(asyncio.run(service.get_athlete("a2")))

        assert flow.state is CheckInState.PROPOSED
        assert flow.override_week is None
        assert flow.proposed_week == 3
        assert flow.week_choices == [1, 2, 3]

    def test_clearing_selection(self, flow, ada):
        """Selecting None returns to UNSELECTED."""
        flow.select(ada)
        flow.select(None)

        assert flow.state is CheckInState.UNSELECTED
        assert flow.athlete is None
