"""
EventDesk Backend — Health Check Route
========================================

What:  Liveness endpoint for process monitors and load balancer health checks.
How:   Answers without touching MongoDB: the store was pinged during startup
       and a failed ping stops the process, so a running process implies a
       store that was reachable at boot.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from eventdesk.models.event import isoformat_ms
from eventdesk.schemas.event import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> dict:
    """Returns status "OK", a message and the current time in ISO-8601."""
    return {
        "status": "OK",
        "message": "Server is running",
        "timestamp": isoformat_ms(datetime.now(timezone.utc)),
    }
