"""
Roster service: the admin and check-in use cases.

The service validates requests, talks to the stores, and hands back
updated records so callers can merge them into whatever they are showing
instead of reloading everything.

Stores are synchronous (the Snowflake connector blocks), so every store
call is pushed onto a worker thread with asyncio.to_thread. That keeps the
event loop free and lets bulk assignment fan out one update per athlete.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional, Protocol

from .errors import ProgramInUseError, RosterValidationError
from .models import Athlete, Program, ProgramRef, RosterRow
from .schedule import (
    DEFAULT_WEEK_CAP,
    Clock,
    clamp_week,
    is_ending_soon,
    resolve_expected_week,
    week_choices,
)

logger = logging.getLogger(__name__)

ATHLETE_EDITABLE_FIELDS = frozenset({
    "first_name",
    "last_name",
    "email",
    "program_id",
    "assigned_date",
    "current_week",
})

PROGRAM_EDITABLE_FIELDS = frozenset({"name", "duration"})


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class AthleteStore(Protocol):
    """
    Persistence for athletes.

    Reads come back joined with their program. update() takes only the
    columns that change and raises AthleteNotFoundError for unknown ids.
    """

    def list_with_programs(self) -> list[Athlete]: ...

    def get(self, athlete_id: str) -> Athlete: ...

    def insert(self, athlete: Athlete) -> None: ...

    def update(self, athlete_id: str, fields: dict[str, Any]) -> None: ...

    def delete(self, athlete_id: str) -> None: ...

    def count_for_program(self, program_id: str) -> int: ...

    def max_week_for_program(self, program_id: str) -> Optional[int]: ...


class ProgramStore(Protocol):
    """Persistence for programs."""

    def list_all(self) -> list[Program]: ...

    def get(self, program_id: str) -> Program: ...

    def insert(self, program: Program) -> None: ...

    def update(self, program_id: str, fields: dict[str, Any]) -> None: ...

    def delete(self, program_id: str) -> None: ...


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class BulkAssignmentResult:
    """
    Outcome of assigning one program to many athletes.

    The updates are independent, so some can land while others fail.
    failed maps athlete id to the error message for that update.
    """
    program: Program
    start_date: date
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def all_failed(self) -> bool:
        return not self.succeeded and bool(self.failed)

    @property
    def is_partial(self) -> bool:
        return bool(self.succeeded) and bool(self.failed)

    @property
    def message(self) -> str:
        if self.all_succeeded:
            return f"Programming assigned to {len(self.succeeded)} athlete(s)"
        if self.all_failed:
            return f"Assignment failed for all {len(self.failed)} athlete(s)"
        return (
            f"Programming assigned to {len(self.succeeded)} athlete(s); "
            f"{len(self.failed)} failed"
        )


def build_roster_row(athlete: Athlete, today: date) -> RosterRow:
    """Attach the derived scheduling fields to an athlete."""
    expected_week = None
    if athlete.program and athlete.assigned_date:
        duration = athlete.program.duration
        expected_week = clamp_week(
            resolve_expected_week(athlete.assigned_date, duration, today),
            duration,
        )
    return RosterRow(
        athlete=athlete,
        expected_week=expected_week,
        ending_soon=is_ending_soon(athlete.current_week, athlete.program_duration),
    )


# ---------------------------------------------------------------------------
# Roster Service
# ---------------------------------------------------------------------------

class RosterService:
    """
    Orchestrates roster reads and writes.

    Holds no roster state of its own; every call goes to the stores.
    Validation happens before the first write so a rejected request
    leaves the store untouched.
    """

    def __init__(
        self,
        athletes: AthleteStore,
        programs: ProgramStore,
        clock: Clock,
        default_week_cap: int = DEFAULT_WEEK_CAP,
    ) -> None:
        self._athletes = athletes
        self._programs = programs
        self._clock = clock
        self._default_week_cap = default_week_cap

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def default_week_cap(self) -> int:
        return self._default_week_cap

    # -- reads -------------------------------------------------------------

    async def list_athletes(self) -> list[Athlete]:
        return await asyncio.to_thread(self._athletes.list_with_programs)

    async def list_roster(self) -> list[RosterRow]:
        """All athletes (ordered by last name) with derived fields."""
        athletes = await self.list_athletes()
        today = self._clock.today()
        return [build_roster_row(athlete, today) for athlete in athletes]

    async def list_programs(self) -> list[Program]:
        return await asyncio.to_thread(self._programs.list_all)

    async def get_athlete(self, athlete_id: str) -> Athlete:
        return await asyncio.to_thread(self._athletes.get, athlete_id)

    async def get_program(self, program_id: str) -> Program:
        return await asyncio.to_thread(self._programs.get, program_id)

    def roster_row(self, athlete: Athlete) -> RosterRow:
        return build_roster_row(athlete, self._clock.today())

    # -- athletes ----------------------------------------------------------

    async def create_athlete(
        self,
        first_name: str,
        last_name: str,
        email: str,
        program_id: Optional[str],
        assigned_date: Optional[date],
    ) -> Athlete:
        """
        Add an athlete with their first program assignment.

        New athletes always start on week 1.
        """
        if not program_id:
            raise RosterValidationError("Please select a program")
        if assigned_date is None:
            raise RosterValidationError("A start date is required")

        program = await self.get_program(program_id)
        athlete = Athlete(
            first_name=first_name,
            last_name=last_name,
            email=email,
            current_week=1,
            assigned_date=assigned_date,
            program_id=program.id,
            program=ProgramRef.from_program(program),
        )
        await asyncio.to_thread(self._athletes.insert, athlete)

        logger.info(
            "Athlete created",
            extra={"athlete_id": athlete.id, "program_id": program.id},
        )
        return athlete

    async def update_athlete(self, athlete_id: str, changes: dict[str, Any]) -> Athlete:
        """
        Edit one athlete.

        Unlike bulk assignment, switching program here keeps current_week
        as is; the admin sets the week explicitly. The resulting week must
        still fit inside the program.
        """
        unknown = set(changes) - ATHLETE_EDITABLE_FIELDS
        if unknown:
            raise RosterValidationError(f"Cannot edit fields: {', '.join(sorted(unknown))}")
        cleared = [
            name for name in ("first_name", "last_name", "email", "current_week")
            if name in changes and changes[name] is None
        ]
        if cleared:
            raise RosterValidationError(f"Fields cannot be empty: {', '.join(cleared)}")

        current = await self.get_athlete(athlete_id)

        program_ref = current.program
        if "program_id" in changes:
            if changes["program_id"]:
                program_ref = ProgramRef.from_program(await self.get_program(changes["program_id"]))
            else:
                program_ref = None

        program_id = changes.get("program_id", current.program_id)
        assigned_date = changes.get("assigned_date", current.assigned_date)
        current_week = changes.get("current_week", current.current_week)

        if program_id and assigned_date is None:
            raise RosterValidationError("A start date is required when a program is assigned")
        if current_week is None or current_week < 1:
            raise RosterValidationError("current_week must be at least 1")
        week_in_question = "current_week" in changes or "program_id" in changes
        if week_in_question and program_ref and current_week > program_ref.duration:
            raise RosterValidationError(
                f"current_week {current_week} exceeds program duration of "
                f"{program_ref.duration} weeks"
            )

        try:
            updated = current.with_changes(**changes, program=program_ref)
        except ValueError as e:
            raise RosterValidationError(str(e)) from e

        if changes:
            await asyncio.to_thread(self._athletes.update, athlete_id, dict(changes))

        logger.info(
            "Athlete updated",
            extra={"athlete_id": athlete_id, "fields": sorted(changes)},
        )
        return updated

    async def delete_athlete(self, athlete_id: str) -> None:
        await asyncio.to_thread(self._athletes.delete, athlete_id)
        logger.info("Athlete deleted", extra={"athlete_id": athlete_id})

    # -- assignment --------------------------------------------------------

    async def bulk_assign(
        self,
        athlete_ids: Iterable[str],
        program_id: Optional[str],
        start_date: date,
    ) -> BulkAssignmentResult:
        """
        Assign a program and start date to every selected athlete.

        Each athlete gets its own update, all issued at once. There is no
        transaction across them: the result lists which ids landed and
        which failed.
        """
        ids = sorted(set(athlete_ids))
        if not program_id:
            raise RosterValidationError("Please select a program")
        if not ids:
            raise RosterValidationError("Select at least one athlete")

        program = await self.get_program(program_id)
        fields = {
            "program_id": program.id,
            "assigned_date": start_date,
            "current_week": 1,
        }

        logger.info(
            "Bulk assignment started",
            extra={
                "program_id": program.id,
                "start_date": start_date.isoformat(),
                "athlete_count": len(ids),
            },
        )

        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self._athletes.update, athlete_id, dict(fields)) for athlete_id in ids),
            return_exceptions=True,
        )

        result = BulkAssignmentResult(program=program, start_date=start_date)
        for athlete_id, outcome in zip(ids, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                result.failed[athlete_id] = str(outcome)
            else:
                result.succeeded.append(athlete_id)

        if result.failed:
            logger.warning(
                "Bulk assignment had failures",
                extra={
                    "program_id": program.id,
                    "succeeded": len(result.succeeded),
                    "failed": sorted(result.failed),
                },
            )
        else:
            logger.info(
                "Bulk assignment complete",
                extra={"program_id": program.id, "athlete_count": len(ids)},
            )
        return result

    # -- check-in ----------------------------------------------------------

    async def record_checkin(self, athlete_id: str, week: int) -> Athlete:
        """
        Persist an athlete's confirmed week along with today's date.

        The week must be one the check-in selector offers for this athlete.
        """
        athlete = await self.get_athlete(athlete_id)
        choices = week_choices(athlete.program_duration, self._default_week_cap)
        if week not in choices:
            raise RosterValidationError(
                f"Week must be between 1 and {choices[-1]}"
            )

        today = self._clock.today()
        fields = {"current_week": week, "last_checkin": today}
        await asyncio.to_thread(self._athletes.update, athlete_id, fields)

        logger.info(
            "Athlete checked in",
            extra={"athlete_id": athlete_id, "week": week},
        )
        return athlete.with_changes(**fields)

    # -- programs ----------------------------------------------------------

    async def create_program(self, name: str, duration: int) -> Program:
        try:
            program = Program(name=name, duration=duration)
        except ValueError as e:
            raise RosterValidationError(str(e)) from e
        await asyncio.to_thread(self._programs.insert, program)
        logger.info("Program created", extra={"program_id": program.id})
        return program

    async def update_program(self, program_id: str, changes: dict[str, Any]) -> Program:
        """
        Rename or resize a program.

        A program can't be shortened below the week any of its athletes
        is on; move those athletes back first.
        """
        unknown = set(changes) - PROGRAM_EDITABLE_FIELDS
        if unknown:
            raise RosterValidationError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        current = await self.get_program(program_id)
        try:
            updated = Program(
                id=current.id,
                name=changes.get("name", current.name),
                duration=changes.get("duration", current.duration),
            )
        except ValueError as e:
            raise RosterValidationError(str(e)) from e

        if updated.duration < current.duration:
            furthest = await asyncio.to_thread(self._athletes.max_week_for_program, program_id)
            if furthest and furthest > updated.duration:
                raise RosterValidationError(
                    f"An athlete is on week {furthest}; duration cannot drop "
                    f"below that"
                )

        if changes:
            await asyncio.to_thread(self._programs.update, program_id, dict(changes))
        logger.info(
            "Program updated",
            extra={"program_id": program_id, "fields": sorted(changes)},
        )
        return updated

    async def delete_program(self, program_id: str) -> None:
        """
        Delete a program nobody is on.

        Deleting a program athletes still reference would leave them
        pointing at nothing, so it is refused.
        """
        await self.get_program(program_id)
        in_use = await asyncio.to_thread(self._athletes.count_for_program, program_id)
        if in_use:
            raise ProgramInUseError(program_id, in_use)
        await asyncio.to_thread(self._programs.delete, program_id)
        logger.info("Program deleted", extra={"program_id": program_id})


__all__ = [
    "AthleteStore",
    "BulkAssignmentResult",
    "ProgramStore",
    "RosterService",
    "build_roster_row",
]
