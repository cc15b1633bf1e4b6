# =============================================================================
# app/routers/health.py - Health Check Endpoint
# =============================================================================
# Provides the health check endpoint for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import ContextDep

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    uptime: float


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix, e.g. 2025-01-15T10:00:00.000Z"""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(context: ContextDep):
    """
    Health check endpoint.

    Returns status, the request time and how long the process has been up.
    """
    return HealthResponse(
        status="OK",
        timestamp=iso_timestamp(datetime.now(timezone.utc)),
        uptime=context.uptime(),
    )
