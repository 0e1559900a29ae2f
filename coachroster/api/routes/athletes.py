"""
Athlete endpoints.

Create, read, edit and delete single athletes. Every write returns the
athlete as it now stands so the caller can update its view in place.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.roster.errors import RosterError
from ..dependencies import AuthenticatedUser, RosterServiceDep
from ..errors import http_error
from ..schemas import RosterRowItem

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------

class AthleteCreateRequest(BaseModel):
    """A new athlete and their first program."""
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=320)
    program_id: Optional[str] = Field(None, description="Program to start on")
    assigned_date: Optional[date] = Field(None, description="Program start date")


class AthleteUpdateRequest(BaseModel):
    """
    Fields to change on an athlete. Omitted fields are left alone.

    Changing program_id does not reset current_week.
    """
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=320)
    program_id: Optional[str] = Field(None, description="New program, or null to unassign")
    assigned_date: Optional[date] = None
    current_week: Optional[int] = Field(None, ge=1)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[RosterRowItem],
    summary="List athletes",
)
async def list_athletes(
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> list[RosterRowItem]:
    try:
        rows = await service.list_roster()
    except RosterError as e:
        raise http_error(e, "list athletes")
    return [RosterRowItem.from_row(row) for row in rows]


@router.post(
    "",
    response_model=RosterRowItem,
    status_code=status.HTTP_201_CREATED,
    summary="Create athlete",
    description="Add an athlete on week 1 of the chosen program",
)
async def create_athlete(
    request: AthleteCreateRequest,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> RosterRowItem:
    try:
        athlete = await service.create_athlete(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            program_id=request.program_id,
            assigned_date=request.assigned_date,
        )
    except RosterError as e:
        raise http_error(e, "create athlete")
    return RosterRowItem.from_row(service.roster_row(athlete))


@router.get(
    "/{athlete_id}",
    response_model=RosterRowItem,
    summary="Get athlete",
)
async def get_athlete(
    athlete_id: str,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> RosterRowItem:
    try:
        athlete = await service.get_athlete(athlete_id)
    except RosterError as e:
        raise http_error(e, "load athlete")
    return RosterRowItem.from_row(service.roster_row(athlete))


@router.patch(
    "/{athlete_id}",
    response_model=RosterRowItem,
    summary="Edit athlete",
    description="Change identity fields, program, start date or current week",
)
async def update_athlete(
    athlete_id: str,
    request: AthleteUpdateRequest,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> RosterRowItem:
    changes = request.model_dump(exclude_unset=True)

    logger.info(
        "Editing athlete",
        extra={"athlete_id": athlete_id, "fields": sorted(changes)},
    )

    try:
        athlete = await service.update_athlete(athlete_id, changes)
    except RosterError as e:
        raise http_error(e, "update athlete")
    return RosterRowItem.from_row(service.roster_row(athlete))


@router.delete(
    "/{athlete_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete athlete",
)
async def delete_athlete(
    athlete_id: str,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> None:
    try:
        await service.delete_athlete(athlete_id)
    except RosterError as e:
        raise http_error(e, "delete athlete")
