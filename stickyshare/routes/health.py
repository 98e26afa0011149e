"""
StickyShare Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and container probes.
How:   Probes the storage gateway and reports aggregate status.

Status levels:
    healthy:   gateway reachable (HTTP 200)
    unhealthy: gateway unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from stickyshare import __version__
from stickyshare.dependencies import get_gateway
from stickyshare.schemas.note import HealthResponse
from stickyshare.services.gateway_base import StorageGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Storage gateway unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    gateway: StorageGateway = Depends(get_gateway),
) -> HealthResponse:
    gateway_status = "connected"
    overall = "healthy"

    if not await gateway.health_check():
        gateway_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: storage gateway unreachable")

    return HealthResponse(
        status=overall,
        version=__version__,
        gateway=gateway_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
