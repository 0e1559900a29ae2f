"""
Snowflake repository for training programs.
"""

from typing import Any

from coachroster.core.roster.errors import ProgramNotFoundError
from coachroster.core.roster.models import Program

from .base import SnowflakeRepository, build_update

PROGRAM_COLUMNS = ("name", "duration")


class ProgramRepository(SnowflakeRepository):
    """Repository for program persistence. Lists are ordered by name."""

    def list_all(self) -> list[Program]:
        with self._cursor("list programs") as cursor:
            cursor.execute("SELECT id, name, duration FROM programs ORDER BY name")
            return [self._build_program(row) for row in cursor.fetchall()]

    def get(self, program_id: str) -> Program:
        with self._cursor("load program", program_id=program_id) as cursor:
            cursor.execute(
                "SELECT id, name, duration FROM programs WHERE id = %s",
                (program_id,),
            )
            row = cursor.fetchone()
            if not row:
                raise ProgramNotFoundError(f"Program {program_id} not found")
            return self._build_program(row)

    def insert(self, program: Program) -> None:
        with self._cursor("insert program", program_id=program.id) as cursor:
            cursor.execute(
                "INSERT INTO programs (id, name, duration) VALUES (%s, %s, %s)",
                (program.id, program.name, program.duration),
            )
            self._conn.commit()

    def update(self, program_id: str, fields: dict[str, Any]) -> None:
        query, values = build_update("programs", fields, PROGRAM_COLUMNS)
        with self._cursor("update program", program_id=program_id) as cursor:
            cursor.execute(query, (*values, program_id))
            if cursor.rowcount == 0:
                raise ProgramNotFoundError(f"Program {program_id} not found")
            self._conn.commit()

    def delete(self, program_id: str) -> None:
        with self._cursor("delete program", program_id=program_id) as cursor:
            cursor.execute("DELETE FROM programs WHERE id = %s", (program_id,))
            if cursor.rowcount == 0:
                raise ProgramNotFoundError(f"Program {program_id} not found")
            self._conn.commit()

    def _build_program(self, row) -> Program:
        return Program(id=row[0], name=row[1], duration=row[2])
