"""
Admin dashboard endpoint.

Returns everything the roster view needs in one call: every athlete with
the derived scheduling fields, plus the programs to assign from.
"""

import logging

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.roster.errors import RosterError
from ..dependencies import AuthenticatedUser, RosterServiceDep
from ..errors import http_error
from ..schemas import ProgramItem, RosterRowItem

logger = logging.getLogger(__name__)

router = APIRouter()


class RosterResponse(BaseModel):
    """The admin dashboard."""
    athletes: list[RosterRowItem] = Field(description="Athletes ordered by last name")
    programs: list[ProgramItem] = Field(description="Programs ordered by name")
    total: int = Field(description="Number of athletes")
    ending_soon_count: int = Field(description="Athletes on their last two weeks")


@router.get(
    "",
    response_model=RosterResponse,
    status_code=status.HTTP_200_OK,
    summary="Get the roster",
    description="All athletes with expected week and ending-soon flag, plus all programs",
)
async def get_roster(
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> RosterResponse:
    try:
        rows = await service.list_roster()
        programs = await service.list_programs()
    except RosterError as e:
        raise http_error(e, "load roster")

    items = [RosterRowItem.from_row(row) for row in rows]

    logger.info(
        "Roster loaded",
        extra={"athletes": len(items), "programs": len(programs)},
    )

    return RosterResponse(
        athletes=items,
        programs=[ProgramItem.from_domain(p) for p in programs],
        total=len(items),
        ending_soon_count=sum(1 for item in items if item.ending_soon),
    )
