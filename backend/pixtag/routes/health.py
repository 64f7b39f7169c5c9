"""
PixTag Backend — Health Check Route
====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database (SELECT 1) and that the upload directory is
       usable, and reports uptime.

Status levels:
    - healthy:   database reachable and storage usable (HTTP 200)
    - unhealthy: either check failed (HTTP 503)
"""

import logging
import os
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from pixtag import __version__
from pixtag.database import engine
from pixtag.schemas.common import HealthResponse
from pixtag.services.image_service import image_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Storage ─────────────────────────────────────────────────────
    # A root that does not exist yet is fine as long as its parent is writable
    storage_root = image_service.files.storage_root
    probe = storage_root if storage_root.exists() else storage_root.parent
    if not os.access(probe, os.W_OK):
        storage_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: storage not writable: %s", probe)

    if overall != "healthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
