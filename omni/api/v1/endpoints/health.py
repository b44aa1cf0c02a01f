"""Health check endpoints: liveness and readiness (database + cache)."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from omni.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 when the database answers SELECT 1; 503 otherwise.

    The cache fails open, so a down cache is reported but does not make the
    service unready.
    """
    database = getattr(request.app.state, "database", None)
    cache = getattr(request.app.state, "cache", None)

    database_ok = database is not None and await database.health_check()
    if cache is None:
        cache_status = "disabled"
    else:
        cache_status = "ok" if await cache.ping() else "unavailable"

    if database_ok:
        return ReadinessResponse(database="ok", cache=cache_status)
    return JSONResponse(
        status_code=503,
        content=ReadinessErrorResponse(
            message="Database is unreachable",
            database="unavailable",
            cache=cache_status,
        ).model_dump(),
    )
