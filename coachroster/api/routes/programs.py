"""
Training program endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.roster.errors import RosterError
from ..dependencies import AuthenticatedUser, RosterServiceDep
from ..errors import http_error
from ..schemas import ProgramItem

logger = logging.getLogger(__name__)

router = APIRouter()


class ProgramCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    duration: int = Field(ge=1, description="Program length in weeks")


class ProgramUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    duration: Optional[int] = Field(None, ge=1)


@router.get(
    "",
    response_model=list[ProgramItem],
    summary="List programs",
)
async def list_programs(
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> list[ProgramItem]:
    try:
        programs = await service.list_programs()
    except RosterError as e:
        raise http_error(e, "list programs")
    return [ProgramItem.from_domain(p) for p in programs]


@router.post(
    "",
    response_model=ProgramItem,
    status_code=status.HTTP_201_CREATED,
    summary="Create program",
)
async def create_program(
    request: ProgramCreateRequest,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> ProgramItem:
    try:
        program = await service.create_program(request.name, request.duration)
    except RosterError as e:
        raise http_error(e, "create program")
    return ProgramItem.from_domain(program)


@router.patch(
    "/{program_id}",
    response_model=ProgramItem,
    summary="Edit program",
)
async def update_program(
    program_id: str,
    request: ProgramUpdateRequest,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> ProgramItem:
    try:
        program = await service.update_program(
            program_id, request.model_dump(exclude_unset=True, exclude_none=True)
        )
    except RosterError as e:
        raise http_error(e, "update program")
    return ProgramItem.from_domain(program)


@router.delete(
    "/{program_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete program",
    description="Refused with 409 while any athlete is assigned to the program",
)
async def delete_program(
    program_id: str,
    api_key: AuthenticatedUser,
    service: RosterServiceDep,
) -> None:
    try:
        await service.delete_program(program_id)
    except RosterError as e:
        raise http_error(e, "delete program")
