"""
Response Showcase — Health Check Route
========================================

What:  Health check endpoint for uptime monitoring and container orchestration.
How:   The service has no external dependencies, so "healthy" means the
       process is up and its contract registry is mounted.
"""

import time

from fastapi import APIRouter, Depends

from showcase import __version__
from showcase.routes.dispatch import get_registry
from showcase.schemas.envelope import HealthResponse
from showcase.services.registry import ContractRegistry

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(registry: ContractRegistry = Depends(get_registry)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        routes=len(registry),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
