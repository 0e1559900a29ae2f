"""
Unit tests for the admin dashboard view state.
"""

import asyncio
from datetime import date

import pytest

from coachroster.core.roster.dashboard import DashboardState
from coachroster.core.roster.errors import RosterValidationError
from coachroster.core.roster.models import Program


@pytest.fixture
def dashboard(service, clock) -> DashboardState:
    state = DashboardState(clock)
    asyncio.run(state.load(service))
    return state


class TestLoad:
    """Tests for loading the dashboard."""

    def test_loads_rows_and_programs(self, dashboard, clock):
        """Load fills rows, programs and today's start date."""
        assert dashboard.athlete_ids == ["a2", "a1", "a3"]
        assert [p.id for p in dashboard.programs] == ["p1", "p2"]
        assert dashboard.start_date == clock.today()

    def test_reload_drops_selection_for_missing_athletes(self, dashboard, service):
        """Reloading deselects athletes that no longer exist."""
        dashboard.toggle("a3")
        asyncio.run(service.delete_athlete("a3"))

        asyncio.run(dashboard.load(service))

        assert dashboard.selection.is_empty


class TestSelection:
    """Tests for dashboard selection."""

    def test_select_all_and_none(self, dashboard):
        """The header checkbox selects everyone or no one."""
        dashboard.select_all()
        assert dashboard.selection.ids == {"a1", "a2", "a3"}

        dashboard.select_all(False)
        assert dashboard.selection.is_empty

    def test_assignment_needs_a_selection(self, dashboard):
        """Assign mode can't open with nothing selected."""
        with pytest.raises(RosterValidationError):
            dashboard.begin_assignment()
        assert not dashboard.assign_mode


class TestAssign:
    """Tests for running a bulk assignment from the dashboard."""

    def test_success_merges_rows_and_clears_selection(self, dashboard, service):
        """A full success updates rows in place and resets the form."""
        dashboard.select_all()
        dashboard.begin_assignment()
        dashboard.choose_program("p1")
        dashboard.choose_start_date(date(2024, 3, 1))

        result = asyncio.run(dashboard.assign(service))

        assert result.all_succeeded
        assert dashboard.selection.is_empty
        assert not dashboard.assign_mode
        assert dashboard.program_id is None
        for athlete_id in ("a1", "a2", "a3"):
            row = dashboard.row(athlete_id)
            assert row.athlete.program.id == "p1"
            assert row.athlete.assigned_date == date(2024, 3, 1)
            assert row.athlete.current_week == 1
            assert row.expected_week == 4

    def test_no_program_is_rejected_and_nothing_changes(self, dashboard, service, connection):
        """Assigning without a program keeps the form and the data."""
        dashboard.toggle("a3")
        dashboard.begin_assignment()

        with pytest.raises(RosterValidationError):
            asyncio.run(dashboard.assign(service))

        assert dashboard.assign_mode
        assert "a3" in dashboard.selection
        assert connection._get_athlete("a3")["program_id"] is None

    def test_partial_failure_keeps_failed_selected(self, dashboard, service, connection):
        """After a partial failure only the failed athletes stay selected."""
        connection._fail_writes_for("a2")
        dashboard.select_all()
        dashboard.begin_assignment()
        dashboard.choose_program("p1")

        result = asyncio.run(dashboard.assign(service))

        assert result.is_partial
        assert list(dashboard.selection) == ["a2"]
        assert dashboard.assign_mode
        assert dashboard.row("a3").athlete.program.id == "p1"
        assert dashboard.row("a2").athlete.program.id == "p2"

    def test_cancel_clears_form(self, dashboard):
        """Cancelling leaves assign mode and clears the selection."""
        dashboard.toggle("a1")
        dashboard.begin_assignment()
        dashboard.choose_program("p2")

        dashboard.cancel_assignment()

        assert not dashboard.assign_mode
        assert dashboard.program_id is None
        assert dashboard.selection.is_empty


class TestDeltas:
    """Tests for merging single-record changes into the dashboard."""

    def test_merge_athlete_keeps_last_name_order(self, dashboard, service):
        """A merged athlete lands in last-name order."""
        athlete = asyncio.run(service.create_athlete(
            "Katherine", "Johnson", "kj@example.com", "p2", date(2024, 3, 22),
        ))

        dashboard.merge_athlete(athlete)

        assert dashboard.athlete_ids == ["a2", athlete.id, "a1", "a3"]
        assert dashboard.row(athlete.id).expected_week == 1

    def test_remove_athlete_deselects(self, dashboard):
        """Removing an athlete also deselects them."""
        dashboard.toggle("a1")
        dashboard.remove_athlete("a1")

        assert dashboard.row("a1") is None
        assert "a1" not in dashboard.selection

    def test_merge_and_remove_program(self, dashboard):
        """Programs are merged in name order and removed by id."""
        dashboard.merge_program(Program(id="p3", name="Aerobic", duration=6))
        assert [p.id for p in dashboard.programs] == ["p3", "p1", "p2"]

        dashboard.remove_program("p3")
        assert [p.id for p in dashboard.programs] == ["p1", "p2"]
