"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from autocatalog.infrastructure.config import settings

router = APIRouter()

SERVICE_NAME = "autocatalog-api"


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str
    sources: dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=settings.api_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Reports the configured upstream sources; it does not call them, so an
    upstream outage does not take the catalog out of rotation.

    Returns:
        Readiness status.
    """
    return ReadinessResponse(
        status="ready",
        sources={
            "taxonomy": request.app.state.taxonomy_client.base_url,
            "products": request.app.state.product_client.base_url,
        },
    )
