"""
Health check API endpoints.

Routes: GET /health

Dependencies: chunkstream.configs
System role: Liveness check for the ingestion API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chunkstream import __version__
from chunkstream.api.deps import get_settings_dependency
from chunkstream.configs import Settings


class HealthResponse(BaseModel):
    """Liveness and build information."""

    status: str
    message: str
    version: str
    environment: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings_dependency)) -> HealthResponse:
    """Report that the API process is up."""
    return HealthResponse(
        status="healthy",
        message="Server Healthy",
        version=__version__,
        environment=settings.environment,
    )
