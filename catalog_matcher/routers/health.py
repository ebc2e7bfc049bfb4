"""Health check endpoints for system monitoring."""

import logging
import time
from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..container import Services, get_services
from ..utils.errors import CatalogMatcherError

# Create router
router = APIRouter(prefix="/health", tags=["System"])

# Configure logger
logger = logging.getLogger(__name__)


class ServiceCheck(BaseModel):
    """Model for individual service health check."""

    name: str
    status: Literal["healthy", "unhealthy"]
    duration_ms: float | None = None
    error: str | None = None


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy", "unhealthy"]
    timestamp: float
    duration_ms: float
    checks: List[ServiceCheck]


async def _check_index(services: Services) -> ServiceCheck:
    try:
        index_start = time.time()
        status = await services.index.get_status()
        index_healthy = bool(status.get("exists"))
        return ServiceCheck(
            name="vector_index",
            status="healthy" if index_healthy else "unhealthy",
            duration_ms=round((time.time() - index_start) * 1000, 2),
            error=None if index_healthy else f"Collection {status.get('collection')} does not exist",
        )
    except CatalogMatcherError as e:
        logger.error(f"Vector index health check error: {e.message}")
        return ServiceCheck(name="vector_index", status="unhealthy", error=e.message)


@router.get("/", summary="System health check", response_model=HealthCheckResponse)
async def health_check(request: Request, services: Services = Depends(get_services)) -> HealthCheckResponse:
    """Check the embedding provider configuration and the vector index.

    Raises:
        HTTPException: 503 if any check is unhealthy
    """
    start_time = time.time()
    checks: List[ServiceCheck] = []

    embeddings_ready = services.embeddings.is_configured
    checks.append(
        ServiceCheck(
            name="embeddings",
            status="healthy" if embeddings_ready else "unhealthy",
            error=None if embeddings_ready else "Embedding provider not configured",
        )
    )

    index_error = getattr(request.app.state, "index_error", None)
    if index_error:
        checks.append(ServiceCheck(name="vector_index", status="unhealthy", error=index_error))
    else:
        checks.append(await _check_index(services))

    # Determine overall health
    all_healthy = all(check.status == "healthy" for check in checks)

    response = HealthCheckResponse(
        status="healthy" if all_healthy else "unhealthy",
        timestamp=time.time(),
        duration_ms=round((time.time() - start_time) * 1000, 2),
        checks=checks,
    )

    # Return 503 if unhealthy
    if not all_healthy:
        raise HTTPException(status_code=503, detail=response.model_dump())

    return response
