"""
Liveness and readiness probes.

GET /health answers as long as the process is up. GET /health/ready also
checks configuration and runs SELECT 1 against the roster database, and
returns 503 when either fails so the instance is taken out of rotation.
Neither endpoint needs an API key.
"""

import asyncio
import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...config.settings import Settings
from ...core.roster.errors import RosterError
from ...infrastructure.snowflake.repositories import AthleteRepository
from ..dependencies import AthleteRepositoryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class LivenessResponse(BaseModel):
    status: Literal["ok"] = "ok"
    version: str
    details: dict[str, Any] = {}


class ProbeResult(BaseModel):
    name: str
    ok: bool
    detail: Optional[str] = None


class ReadinessResponse(BaseModel):
    ready: bool
    version: str
    probes: list[ProbeResult]


def _probe_configuration(settings: Settings) -> ProbeResult:
    missing = settings.validate_required_fields()
    if missing:
        return ProbeResult(name="configuration", ok=False, detail=f"Not set: {', '.join(missing)}")
    return ProbeResult(name="configuration", ok=True)


async def _probe_database(repository: AthleteRepository, mock_mode: bool) -> ProbeResult:
    try:
        await asyncio.to_thread(repository.ping)
    except RosterError as e:
        return ProbeResult(name="database", ok=False, detail=str(e))
    return ProbeResult(name="database", ok=True, detail="in-memory" if mock_mode else None)


@router.get(
    "",
    response_model=LivenessResponse,
    summary="Liveness probe",
)
async def liveness(settings: SettingsDep) -> LivenessResponse:
    return LivenessResponse(
        version=__version__,
        details={
            "mock_mode": {"snowflake": settings.snowflake_mock_mode},
            "timezone": settings.local_timezone,
        },
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"description": "A probe failed", "model": ReadinessResponse}},
)
async def readiness(
    response: Response,
    settings: SettingsDep,
    repository: AthleteRepositoryDep,
) -> ReadinessResponse:
    probes = [
        _probe_configuration(settings),
        await _probe_database(repository, settings.snowflake_mock_mode),
    ]
    ready = all(probe.ok for probe in probes)

    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Not ready",
            extra={"failed": {p.name: p.detail for p in probes if not p.ok}},
        )

    return ReadinessResponse(ready=ready, version=__version__, probes=probes)
