"""
Roster management logic.

Contains the domain models, week arithmetic, the roster service and the
view state for the admin dashboard and athlete check-in.
"""

from .checkin import CheckInFlow, CheckInState, propose_week
from .dashboard import DashboardState
from .errors import (
    AthleteNotFoundError,
    ProgramInUseError,
    ProgramNotFoundError,
    RosterError,
    RosterStoreError,
    RosterValidationError,
)
from .models import Athlete, Program, ProgramRef, RosterRow
from .schedule import (
    DEFAULT_WEEK_CAP,
    Clock,
    FixedClock,
    SystemClock,
    clamp_week,
    is_ending_soon,
    resolve_expected_week,
    week_choices,
)
from .selection import SelectionSet
from .service import BulkAssignmentResult, RosterService, build_roster_row

__all__ = [
    "Athlete",
    "AthleteNotFoundError",
    "BulkAssignmentResult",
    "CheckInFlow",
    "CheckInState",
    "Clock",
    "DEFAULT_WEEK_CAP",
    "DashboardState",
    "FixedClock",
    "Program",
    "ProgramInUseError",
    "ProgramNotFoundError",
    "ProgramRef",
    "RosterError",
    "RosterRow",
    "RosterService",
    "RosterStoreError",
    "RosterValidationError",
    "SelectionSet",
    "SystemClock",
    "build_roster_row",
    "clamp_week",
    "is_ending_soon",
    "propose_week",
    "resolve_expected_week",
    "week_choices",
]
