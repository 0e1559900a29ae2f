"""
Bulk program assignment.

Assigns one program and start date to a set of athletes and resets each
of them to week 1. The updates run concurrently and independently, so the
response says which athletes were updated and which were not:

- 200 when every athlete was updated
- 207 when some were
- 502 when none were
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from ...core.roster.errors import RosterError
from ..dependencies import AuthenticatedUser, ClockDep, RosterServiceDep
from ..errors import http_error
from ..schemas import ProgramItem

logger = logging.getLogger(__name__)

router = APIRouter()


class BulkAssignmentRequest(BaseModel):
    """Program and start date for the selected athletes."""
    athlete_ids: list[str] = Field(
        min_length=1,
        description="Selected athletes",
    )
    program_id: Optional[str] = Field(
        None,
        description="Program to assign. Required; a missing program is rejected before any write.",
    )
    start_date: Optional[date] = Field(
        None,
        description="Program start date. Defaults to today.",
    )


class FailedAssignment(BaseModel):
    athlete_id: str
    error: str


class BulkAssignmentResponse(BaseModel):
    """
    What happened to each selected athlete.

    Updated athletes now have this program, this start date and
    current_week 1; callers can merge that without re-reading the roster.
    """
    program: ProgramItem
    start_date: date
    current_week: int = 1
    succeeded_ids: list[str]
    failed: list[FailedAssignment]
    message: str


@router.post(
    "",
    response_model=BulkAssignmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Assign a program to athletes",
    responses={
        207: {"description": "Some athletes were updated", "model": BulkAssignmentResponse},
        502: {"description": "No athletes were updated", "model": BulkAssignmentResponse},
    },
)
async def assign_program(
    request: BulkAssignmentRequest,
    response: Response,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
    clock: ClockDep,
) -> BulkAssignmentResponse:
    start_date = request.start_date or clock.today()

    try:
        result = await service.bulk_assign(request.athlete_ids, request.program_id, start_date)
    except RosterError as e:
        raise http_error(e, "assign program")

    if result.all_failed:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    elif result.is_partial:
        response.status_code = status.HTTP_207_MULTI_STATUS

    return BulkAssignmentResponse(
        program=ProgramItem.from_domain(result.program),
        start_date=result.start_date,
        succeeded_ids=result.succeeded,
        failed=[
            FailedAssignment(athlete_id=athlete_id, error=error)
            for athlete_id, error in sorted(result.failed.items())
        ],
        message=result.message,
    )
