"""
Exceptions raised by the roster domain.

Routes translate these into HTTP responses; nothing in core knows about
status codes.
"""


class RosterError(Exception):
    """Base class for roster errors."""
    pass


class RosterValidationError(RosterError):
    """
    Raised when a request is rejected before touching the store.

    No writes have happened when this is raised.
    """
    pass


class AthleteNotFoundError(RosterError):
    """Raised when a requested athlete doesn't exist."""
    pass


class ProgramNotFoundError(RosterError):
    """Raised when a requested program doesn't exist."""
    pass


class ProgramInUseError(RosterError):
    """Raised when deleting a program that athletes still reference."""

    def __init__(self, program_id: str, athlete_count: int) -> None:
        super().__init__(
            f"Program {program_id} is assigned to {athlete_count} athlete(s)"
        )
        self.program_id = program_id
        self.athlete_count = athlete_count


class RosterStoreError(RosterError):
    """Raised when the remote store rejects or fails a read/write."""
    pass
