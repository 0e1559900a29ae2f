"""
Domain models for the coaching roster.

These models represent the core business concepts: programs, athletes and
the derived scheduling fields an admin looks at. They have no dependencies
on external frameworks, databases, or APIs.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional
from uuid import uuid4


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid4())


@dataclass
class Program:
    """
    A training program athletes can be assigned to.

    Duration is measured in whole weeks. A program with zero weeks
    can't be followed, so it is rejected at construction.
    """
    name: str
    duration: int
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Program name cannot be empty")
        if self.duration < 1:
            raise ValueError("Program duration must be at least 1 week")


@dataclass(frozen=True)
class ProgramRef:
    """
    The slice of a program that is joined onto an athlete row.

    Frozen because it is a snapshot read alongside the athlete, not the
    program entity itself.
    """
    id: str
    name: str
    duration: int

    @classmethod
    def from_program(cls, program: "Program") -> "ProgramRef":
        return cls(id=program.id, name=program.name, duration=program.duration)


@dataclass
class Athlete:
    """
    An athlete on the roster.

    current_week is what the athlete (or admin) last reported, while the
    expected week is derived from assigned_date. The two drift apart when
    an athlete falls behind or jumps ahead.
    """
    first_name: str
    last_name: str
    email: str
    id: str = field(default_factory=new_id)
    current_week: int = 1
    last_checkin: Optional[date] = None
    assigned_date: Optional[date] = None
    program_id: Optional[str] = None
    program: Optional[ProgramRef] = None

    def __post_init__(self) -> None:
        if self.current_week < 1:
            raise ValueError("current_week must be at least 1")
        if self.program_id and self.assigned_date is None:
            raise ValueError("assigned_date is required once a program is assigned")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def has_program(self) -> bool:
        return self.program is not None

    @property
    def program_duration(self) -> Optional[int]:
        return self.program.duration if self.program else None

    def with_changes(self, **changes) -> "Athlete":
        """Return a copy with the given fields replaced (re-validated)."""
        return replace(self, **changes)


@dataclass(frozen=True)
class RosterRow:
    """
    What the admin dashboard shows for one athlete.

    expected_week is None when the athlete has no program, since there is
    nothing to count weeks against.
    """
    athlete: Athlete
    expected_week: Optional[int]
    ending_soon: bool

    @property
    def id(self) -> str:
        return self.athlete.id
