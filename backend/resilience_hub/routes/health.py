"""
ResilienceHub Backend — Health Check Route
==========================================

What:  Liveness/readiness probe for Docker health checks and load balancers.
How:   Runs `SELECT 1` against the database and reports the session cache state.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)

The session cache is informational only; the service is correct without it.
"""

import logging
import time

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import text

from resilience_hub import __version__
from resilience_hub.config import settings
from resilience_hub.database import engine
from resilience_hub.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _cache_state(request: Request) -> str:
    cache = getattr(request.app.state, "session_cache", None)
    if cache is None or not settings.session_cache_enabled:
        return "disabled"
    return "running" if cache.running else "stopped"


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"
    detail = None

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        detail = "database unreachable"
        logger.warning("Health check: database unreachable: %s", str(e))
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        session_cache=_cache_state(request),
        uptime_seconds=round(time.time() - _start_time, 2),
        detail=detail,
    )
