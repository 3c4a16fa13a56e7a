"""
TravelStory Backend - Health Check Route
==========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the store (SELECT 1) and that the uploads directory is
       writable, then reports an aggregate status.

    Status levels:
    - healthy:   Store reachable and uploads writable
    - degraded:  Uploads directory unavailable (stories still readable)
    - unhealthy: Store unreachable
"""

import logging
import os
import time

from fastapi import APIRouter
from sqlalchemy import text

from travelstory import __version__
from travelstory.config import settings
from travelstory.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        from travelstory.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Uploads Directory ───────────────────────────────────────────
    if not (os.path.isdir(settings.uploads_dir) and os.access(settings.uploads_dir, os.W_OK)):
        storage_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall
        logger.warning("Health check: uploads directory not writable: %s", settings.uploads_dir)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
