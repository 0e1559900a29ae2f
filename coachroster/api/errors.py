"""
Translation from roster errors to HTTP errors.

Routes catch RosterError and raise what this returns, so every endpoint
reports the same failure the same way.
"""

import logging

from fastapi import HTTPException, status

from ..core.roster.errors import (
    AthleteNotFoundError,
    ProgramInUseError,
    ProgramNotFoundError,
    RosterError,
    RosterStoreError,
    RosterValidationError,
)

logger = logging.getLogger(__name__)


def http_error(exc: RosterError, action: str) -> HTTPException:
    """Map a roster error to an HTTPException, logging store failures."""
    if isinstance(exc, RosterValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if isinstance(exc, (AthleteNotFoundError, ProgramNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    if isinstance(exc, ProgramInUseError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{exc}. Reassign those athletes before deleting the program.",
        )

    if isinstance(exc, RosterStoreError):
        logger.error(f"Failed to {action}", extra={"error": str(exc)})
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to {action}. Please try again.",
        )

    logger.error(f"Unexpected roster error while trying to {action}", extra={"error": str(exc)})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )
