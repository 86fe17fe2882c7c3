"""
Todo API — Health Check Route
===============================

What:  GET /health for container health checks and load balancers.
How:   Runs SELECT 1 through the app's Database; answers 503 when it fails so
       orchestrators stop routing traffic to the instance.
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from todo_api import __version__
from todo_api.schemas.task import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
