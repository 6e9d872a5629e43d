import logging

from fastapi import APIRouter
from fastapi.responses import Response

from unfurl.config import settings
from unfurl.core.metrics import get_metrics, get_metrics_content_type

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/health",
    summary="Liveness check",
    description="Basic liveness probe that returns HTTP 200 if the application process is running. Suitable for Kubernetes liveness probes or load balancer health checks.",
)
async def liveness():
    """Liveness probe. Returns 200 if the process is running."""
    return {"status": "healthy"}


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose unfurl metrics in Prometheus exposition format. Returns HTTP 404 if metrics collection is disabled in the application configuration.",
)
async def metrics():
    """Prometheus metrics endpoint."""
    if not settings.METRICS_ENABLED:
        return Response(content="Metrics disabled", status_code=404)

    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type(),
    )
