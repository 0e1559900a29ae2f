"""
ASGI entry point for the roster API.

    SNOWFLAKE_MOCK_MODE=true uvicorn coachroster.main:app --reload

create_app() builds a fully wired app from settings; the module-level
``app`` is the instance servers import.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import assignments, athletes, checkin, health, programs, roster
from .config.settings import get_settings
from .infrastructure.snowflake.client import SnowflakeConnectionError

logging.basicConfig(
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# (router module, path, OpenAPI tag)
ROUTERS = (
    (roster, "/roster", "Roster"),
    (athletes, "/athletes", "Athletes"),
    (programs, "/programs", "Programs"),
    (assignments, "/assignments", "Assignments"),
    (checkin, "/checkin", "Check-in"),
)

DESCRIPTION = """
Coaching roster administration.

## Admin

- **Roster**: `GET /api/v1/roster` - athletes with expected week and
  ending-soon flag, plus programs
- **Athletes / Programs**: create, edit and delete
- **Assign**: `POST /api/v1/assignments` - put selected athletes on a
  program from a start date (resets them to week 1)

## Athlete check-in

1. `GET /api/v1/checkin/athletes` - pick your name
2. `GET /api/v1/checkin/{athlete_id}` - see the proposed week
3. `POST /api/v1/checkin/{athlete_id}` - confirm or correct it

## Authentication

Everything under `/api/v1` needs an `X-API-Key` header.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective configuration on startup, flag anything missing."""
    settings = get_settings()
    logger.info(
        "Roster API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": {"snowflake": settings.snowflake_mock_mode},
            "timezone": settings.local_timezone,
        },
    )

    missing = settings.validate_required_fields()
    if missing:
        logger.error("Configuration incomplete", extra={"missing_fields": missing})

    yield

    logger.info("Roster API stopped")


async def _database_unavailable(request: Request, exc: SnowflakeConnectionError) -> JSONResponse:
    """Could not connect at all; nothing was read or written."""
    logger.error(
        "Database unavailable",
        extra={"path": request.url.path, "error": str(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable. Please try again."},
    )


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, answer with a generic 500."""
    logger.error(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method, "error": str(exc)},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=DESCRIPTION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/health", tags=["Health"])
    for module, path, tag in ROUTERS:
        app.include_router(module.router, prefix=API_PREFIX + path, tags=[tag])

    app.add_exception_handler(SnowflakeConnectionError, _database_unavailable)
    app.add_exception_handler(Exception, _unhandled)

    @app.get("/", include_in_schema=False)
    async def index():
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    logger.debug("App created", extra={"routers": [tag for _, _, tag in ROUTERS]})
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "coachroster.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=get_settings().log_level.lower(),
    )
