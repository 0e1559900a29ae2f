"""
Request-scoped wiring for the routes.

A request gets one database connection. FastAPI caches dependencies per
request, so the athlete and program repositories (and the RosterService
built on them) share it, and it is closed when the response is sent.
Tests replace get_snowflake_connection, get_clock and get_settings via
app.dependency_overrides.
"""

import logging
from typing import Annotated, Generator, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.roster.schedule import Clock, SystemClock
from ..core.roster.service import RosterService
from ..infrastructure.snowflake.client import (
    MockSnowflakeConnection,
    create_snowflake_connection,
)
from ..infrastructure.snowflake.repositories import (
    AthleteRepository,
    ProgramRepository,
    SnowflakeConfig,
    SnowflakeConnection,
)

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# One in-memory database per process, so mock-mode data outlives a request
_shared_mock_connection: Optional[MockSnowflakeConnection] = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """403 unless X-API-Key is one of the configured keys."""
    if not api_key:
        logger.warning("Rejected request without API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Missing X-API-Key header",
        )

    if api_key not in settings.api_keys_list:
        logger.warning("Rejected unknown API key", extra={"key_prefix": api_key[:4]})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

def get_clock(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Clock:
    """Wall clock in the configured local timezone."""
    return SystemClock(settings.timezone)


def _snowflake_config(settings: Settings) -> SnowflakeConfig:
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


def get_snowflake_connection(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[SnowflakeConnection, None, None]:
    """Yield this request's connection and close it afterwards."""
    global _shared_mock_connection

    if settings.snowflake_mock_mode:
        if _shared_mock_connection is None:
            _shared_mock_connection = MockSnowflakeConnection()
        yield _shared_mock_connection
        return

    with create_snowflake_connection(config=_snowflake_config(settings)) as conn:
        yield conn


def get_athlete_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_snowflake_connection)],
) -> AthleteRepository:
    return AthleteRepository(conn)


def get_program_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_snowflake_connection)],
) -> ProgramRepository:
    return ProgramRepository(conn)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def get_roster_service(
    athletes: Annotated[AthleteRepository, Depends(get_athlete_repository)],
    programs: Annotated[ProgramRepository, Depends(get_program_repository)],
    clock: Annotated[Clock, Depends(get_clock)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RosterService:
    return RosterService(
        athletes=athletes,
        programs=programs,
        clock=clock,
        default_week_cap=settings.default_week_cap,
    )


# Shorthands for route signatures
AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
RosterServiceDep = Annotated[RosterService, Depends(get_roster_service)]
AthleteRepositoryDep = Annotated[AthleteRepository, Depends(get_athlete_repository)]
ClockDep = Annotated[Clock, Depends(get_clock)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
