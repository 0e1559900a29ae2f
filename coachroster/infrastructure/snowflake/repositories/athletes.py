"""
Snowflake repository for athletes.

Athletes are always read joined with their program so the roster can show
program name and duration without a second query. The application never
writes SQL itself; it asks this repository in domain terms.
"""

from typing import Any, Optional

from coachroster.core.roster.errors import AthleteNotFoundError
from coachroster.core.roster.models import Athlete, ProgramRef

from .base import SnowflakeRepository, build_update

ATHLETE_COLUMNS = (
    "first_name",
    "last_name",
    "email",
    "current_week",
    "last_checkin",
    "assigned_date",
    "program_id",
)

SELECT_ATHLETES = """
    SELECT
        a.id,
        a.first_name,
        a.last_name,
        a.email,
        a.current_week,
        a.last_checkin,
        a.assigned_date,
        a.program_id,
        p.name AS program_name,
        p.duration AS program_duration
    FROM athletes a
    LEFT JOIN programs p ON a.program_id = p.id
"""


class AthleteRepository(SnowflakeRepository):
    """
    Repository for athlete persistence.

    Each method corresponds to a use case:
    - list_with_programs: the roster and the check-in picker
    - get: one athlete, for edits and check-in
    - insert/update/delete: admin and check-in writes
    - count_for_program: guards program deletion
    - max_week_for_program: guards shortening a program
    """

    def list_with_programs(self) -> list[Athlete]:
        with self._cursor("list athletes") as cursor:
            cursor.execute(SELECT_ATHLETES + " ORDER BY a.last_name")
            return [self._build_athlete(row) for row in cursor.fetchall()]

    def get(self, athlete_id: str) -> Athlete:
        with self._cursor("load athlete", athlete_id=athlete_id) as cursor:
            cursor.execute(SELECT_ATHLETES + " WHERE a.id = %s", (athlete_id,))
            row = cursor.fetchone()
            if not row:
                raise AthleteNotFoundError(f"Athlete {athlete_id} not found")
            return self._build_athlete(row)

    def insert(self, athlete: Athlete) -> None:
        with self._cursor("insert athlete", athlete_id=athlete.id) as cursor:
            cursor.execute("""
                INSERT INTO athletes (
                    id, first_name, last_name, email, current_week,
                    last_checkin, assigned_date, program_id
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                athlete.id,
                athlete.first_name,
                athlete.last_name,
                athlete.email,
                athlete.current_week,
                athlete.last_checkin,
                athlete.assigned_date,
                athlete.program_id,
            ))
            self._conn.commit()

    def update(self, athlete_id: str, fields: dict[str, Any]) -> None:
        """Update only the given columns. Raises if the athlete is gone."""
        query, values = build_update("athletes", fields, ATHLETE_COLUMNS)
        with self._cursor("update athlete", athlete_id=athlete_id) as cursor:
            cursor.execute(query, (*values, athlete_id))
            if cursor.rowcount == 0:
                raise AthleteNotFoundError(f"Athlete {athlete_id} not found")
            self._conn.commit()

    def delete(self, athlete_id: str) -> None:
        with self._cursor("delete athlete", athlete_id=athlete_id) as cursor:
            cursor.execute("DELETE FROM athletes WHERE id = %s", (athlete_id,))
            if cursor.rowcount == 0:
                raise AthleteNotFoundError(f"Athlete {athlete_id} not found")
            self._conn.commit()

    def count_for_program(self, program_id: str) -> int:
        with self._cursor("count program athletes", program_id=program_id) as cursor:
            cursor.execute(
                "SELECT COUNT(*) FROM athletes WHERE program_id = %s",
                (program_id,),
            )
            row = cursor.fetchone()
            return row[0] if row else 0

    def max_week_for_program(self, program_id: str) -> Optional[int]:
        """Highest current_week among the program's athletes, None if it has none."""
        with self._cursor("read program progress", program_id=program_id) as cursor:
            cursor.execute(
                "SELECT MAX(current_week) FROM athletes WHERE program_id = %s",
                (program_id,),
            )
            row = cursor.fetchone()
            return row[0] if row else None

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _build_athlete(self, row) -> Athlete:
        """Construct an Athlete from a joined row."""
        program = None
        # program_name is NULL when the reference is unset or dangling
        if row[7] and row[8] is not None:
            program = ProgramRef(id=row[7], name=row[8], duration=row[9])

        # A program without a start date can't be scheduled; read it as unassigned
        return Athlete(
            id=row[0],
            first_name=row[1] or "",
            last_name=row[2] or "",
            email=row[3] or "",
            current_week=row[4] or 1,
            last_checkin=row[5],
            assigned_date=row[6],
            program_id=row[7] if row[6] else None,
            program=program if row[6] else None,
        )
