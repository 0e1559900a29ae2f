"""
Admin dashboard view state.

Holds what one admin is looking at: the roster rows, the programs to pick
from, the ticked athletes and the assignment form. Changes to the store
come back as records and are merged in here, so the view never needs a
full reload to stay correct.
"""

from datetime import date
from typing import Optional

from .errors import RosterValidationError
from .models import Athlete, Program, ProgramRef, RosterRow
from .schedule import Clock
from .selection import SelectionSet
from .service import BulkAssignmentResult, RosterService, build_roster_row


class DashboardState:
    """
    Session-scoped state for the roster/assignment manager.

    Not shared between admins and not persisted.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self.rows: list[RosterRow] = []
        self.programs: list[Program] = []
        self.selection = SelectionSet()
        self.assign_mode = False
        self.program_id: Optional[str] = None
        self.start_date: date = clock.today()

    # -- loading -----------------------------------------------------------

    async def load(self, service: RosterService) -> None:
        self.rows = await service.list_roster()
        self.programs = await service.list_programs()
        self.selection.retain(self.athlete_ids)

    @property
    def athlete_ids(self) -> list[str]:
        return [row.id for row in self.rows]

    def row(self, athlete_id: str) -> Optional[RosterRow]:
        return next((row for row in self.rows if row.id == athlete_id), None)

    # -- selection ---------------------------------------------------------

    def toggle(self, athlete_id: str) -> bool:
        return self.selection.toggle(athlete_id)

    def select_all(self, checked: bool = True) -> None:
        if checked:
            self.selection.select_all(self.athlete_ids)
        else:
            self.selection.clear()

    # -- assignment form ---------------------------------------------------

    def begin_assignment(self) -> None:
        if self.selection.is_empty:
            raise RosterValidationError("Select at least one athlete")
        self.assign_mode = True

    def choose_program(self, program_id: Optional[str]) -> None:
        self.program_id = program_id or None

    def choose_start_date(self, start_date: date) -> None:
        self.start_date = start_date

    def cancel_assignment(self) -> None:
        self.assign_mode = False
        self.program_id = None
        self.selection.clear()

    async def assign(self, service: RosterService) -> BulkAssignmentResult:
        """
        Run the bulk assignment for the current selection.

        Raises before any write if no program is chosen. If the service
        raises, nothing here changes.
        """
        if not self.program_id:
            raise RosterValidationError("Please select a program")
        result = await service.bulk_assign(self.selection.ids, self.program_id, self.start_date)
        self.apply_assignment(result)
        return result

    def apply_assignment(self, result: BulkAssignmentResult) -> None:
        """
        Merge a bulk assignment into the rows.

        Full success closes the form and clears the selection. Otherwise
        only the athletes that failed stay selected, ready for a retry.
        """
        program = result.program
        for athlete_id in result.succeeded:
            row = self.row(athlete_id)
            if row is None:
                continue
            self.merge_athlete(row.athlete.with_changes(
                program_id=program.id,
                program=ProgramRef.from_program(program),
                assigned_date=result.start_date,
                current_week=1,
            ))

        if result.all_succeeded:
            self.selection.clear()
            self.assign_mode = False
            self.program_id = None
        else:
            self.selection.retain(result.failed)

    # -- single-record deltas ----------------------------------------------

    def merge_athlete(self, athlete: Athlete) -> None:
        """Insert or replace one athlete's row, keeping last-name order."""
        new_row = build_roster_row(athlete, self._clock.today())
        self.rows = [row for row in self.rows if row.id != athlete.id]
        self.rows.append(new_row)
        self.rows.sort(key=lambda row: row.athlete.last_name)

    def remove_athlete(self, athlete_id: str) -> None:
        self.rows = [row for row in self.rows if row.id != athlete_id]
        self.selection.deselect(athlete_id)

    def merge_program(self, program: Program) -> None:
        self.programs = [p for p in self.programs if p.id != program.id]
        self.programs.append(program)
        self.programs.sort(key=lambda p: p.name)

    def remove_program(self, program_id: str) -> None:
        self.programs = [p for p in self.programs if p.id != program_id]
