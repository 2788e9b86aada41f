"""
Storefront Backend — Health Check Route
=========================================

What:  GET /health for container and load-balancer probes.
How:   Runs `SELECT 1` on the context's engine. The answer is always HTTP 200;
       the body says `healthy` or `unhealthy` so probes can decide.
"""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront import __version__
from storefront.context import AppContext
from storefront.dependencies import get_context
from storefront.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(context: AppContext = Depends(get_context)) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with context.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
