"""
Health Check Endpoint
Liveness check for uptime monitors and load balancers.
"""

from fastapi import APIRouter

from backend.schemas.contact import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic liveness check",
    description="Returns ok whenever the process is serving requests.",
)
async def basic_health() -> HealthResponse:
    """
    Basic liveness check.

    Never touches the SMTP relay.
    """
    return HealthResponse(ok=True)
