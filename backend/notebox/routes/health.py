"""
Notebox Backend — Health Check Route
====================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Pings the database with SELECT 1. 200 when reachable, 503 otherwise.
       Unprotected: never passes through the auth gate.
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from notebox import __version__
from notebox.database import Database
from notebox.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request) -> JSONResponse:
    database: Database = request.app.state.database
    db_status = "connected"
    overall = "healthy"

    try:
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", type(e).__name__)

    payload = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=payload.model_dump(),
    )
