"""
Health Check Endpoint.

Basic liveness endpoint used by the platform and by deployment probes.
"""

import time

from fastapi import APIRouter

from openserv_agent.server.schemas import HealthStatus

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health Check",
    description="Check the operational status of the agent server.",
    response_description="Status object with process uptime in seconds.",
)
async def health_check() -> HealthStatus:
    """
    Health check endpoint.

    Returns a status indicator and the number of seconds the server process
    has been up.
    """
    return HealthStatus(status="ok", uptime=time.monotonic() - _STARTED_AT)
