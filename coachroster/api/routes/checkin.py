"""
Athlete self check-in endpoints.

The check-in page works in three steps:
1. Pick your name (GET /athletes)
2. See the week we think you're on (GET /{athlete_id})
3. Confirm it, or send the week you're actually on (POST /{athlete_id})

Only step 3 writes. It stores the week and today's date.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.roster.checkin import propose_week
from ...core.roster.errors import RosterError
from ...core.roster.schedule import week_choices
from ..dependencies import AuthenticatedUser, RosterServiceDep
from ..errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class CheckInAthlete(BaseModel):
    """An entry in the name picker."""
    id: str
    first_name: str
    last_name: str


class CheckInProposal(BaseModel):
    """What the athlete sees before confirming."""
    athlete_id: str
    first_name: str
    last_name: str
    program_name: Optional[str] = Field(None, description="Null without a program")
    duration: Optional[int] = Field(None, description="Program length in weeks")
    assigned_date: Optional[date] = None
    current_week: int = Field(description="Week reported at the last check-in")
    last_checkin: Optional[date] = None
    proposed_week: int = Field(description="Week the athlete should be on")
    week_choices: list[int] = Field(description="Weeks offered if the athlete corrects the proposal")


class CheckInRequest(BaseModel):
    """Omit week to accept the proposal."""
    week: Optional[int] = Field(None, ge=1, description="Corrected week")


class CheckInResponse(BaseModel):
    athlete_id: str
    current_week: int
    last_checkin: date
    message: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/athletes",
    response_model=list[CheckInAthlete],
    summary="List athletes for the name picker",
)
async def list_checkin_athletes(
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> list[CheckInAthlete]:
    try:
        athletes = await service.list_athletes()
    except RosterError as e:
        raise http_error(e, "list athletes")
    return [
        CheckInAthlete(id=a.id, first_name=a.first_name, last_name=a.last_name)
        for a in athletes
    ]


@router.get(
    "/{athlete_id}",
    response_model=CheckInProposal,
    summary="Get the proposed week",
)
async def get_proposal(
    athlete_id: str,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> CheckInProposal:
    try:
        athlete = await service.get_athlete(athlete_id)
    except RosterError as e:
        raise http_error(e, "load athlete")

    return CheckInProposal(
        athlete_id=athlete.id,
        first_name=athlete.first_name,
        last_name=athlete.last_name,
        program_name=athlete.program.name if athlete.program else None,
        duration=athlete.program_duration,
        assigned_date=athlete.assigned_date,
        current_week=athlete.current_week,
        last_checkin=athlete.last_checkin,
        proposed_week=propose_week(athlete, service.clock.today(), service.default_week_cap),
        week_choices=week_choices(athlete.program_duration, service.default_week_cap),
    )


@router.post(
    "/{athlete_id}",
    response_model=CheckInResponse,
    status_code=status.HTTP_200_OK,
    summary="Check in",
    description="Confirm the proposed week, or send the corrected one",
)
async def check_in(
    athlete_id: str,
    request: CheckInRequest,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> CheckInResponse:
    try:
        week = request.week
        if week is None:
            athlete = await service.get_athlete(athlete_id)
            week = propose_week(athlete, service.clock.today(), service.default_week_cap)

        updated = await service.record_checkin(athlete_id, week)
    except RosterError as e:
        raise http_error(e, "check in")

    logger.info(
        "Check-in recorded",
        extra={
            "athlete_id": athlete_id,
            "week": week,
            "overridden": request.week is not None,
        },
    )

    return CheckInResponse(
        athlete_id=updated.id,
        current_week=updated.current_week,
        last_checkin=updated.last_checkin,
        message="Check-in complete! Thanks.",
    )
