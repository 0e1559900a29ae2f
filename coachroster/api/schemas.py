"""
Response models shared by several routers.

Request models live next to the endpoint that accepts them.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from ..core.roster.models import Athlete, Program, ProgramRef, RosterRow


class ProgramItem(BaseModel):
    """A training program."""
    id: str = Field(description="Program identifier")
    name: str = Field(description="Program name")
    duration: int = Field(description="Program length in weeks")

    @classmethod
    def from_domain(cls, program: Program | ProgramRef) -> "ProgramItem":
        return cls(id=program.id, name=program.name, duration=program.duration)


class AthleteItem(BaseModel):
    """An athlete as stored, with their joined program."""
    id: str = Field(description="Athlete identifier")
    first_name: str
    last_name: str
    email: str
    current_week: int = Field(description="Week the athlete last reported")
    last_checkin: Optional[date] = Field(None, description="Date of the last check-in")
    assigned_date: Optional[date] = Field(None, description="Program start date")
    program: Optional[ProgramItem] = Field(None, description="Assigned program, if any")

    @classmethod
    def from_domain(cls, athlete: Athlete) -> "AthleteItem":
        return cls(
            id=athlete.id,
            first_name=athlete.first_name,
            last_name=athlete.last_name,
            email=athlete.email,
            current_week=athlete.current_week,
            last_checkin=athlete.last_checkin,
            assigned_date=athlete.assigned_date,
            program=ProgramItem.from_domain(athlete.program) if athlete.program else None,
        )


class RosterRowItem(AthleteItem):
    """An athlete plus the scheduling fields the dashboard derives."""
    expected_week: Optional[int] = Field(
        None,
        description="Week the athlete should be on by the calendar. Null without a program."
    )
    ending_soon: bool = Field(
        description="True on the final or second-to-final week of the program"
    )

    @classmethod
    def from_row(cls, row: RosterRow) -> "RosterRowItem":
        return cls(
            **AthleteItem.from_domain(row.athlete).model_dump(),
            expected_week=row.expected_week,
            ending_soon=row.ending_soon,
        )
