# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints (health, readiness, metrics).
Pure HTTP layer: no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from volunteer_registry.core.config import settings
from volunteer_registry.core.dependencies import get_registry_store

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe for Docker and orchestration."""
    store = get_registry_store()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "storage_backend": store.backend,
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe: verifies the storage backend answers."""
    store = get_registry_store()
    ready = store.ping()
    body = {
        "status": "ready" if ready else "not_ready",
        "service": settings.SERVICE_NAME,
        "storage_backend": store.backend,
        "groups_count": store.groups.count() if ready else None,
    }
    return JSONResponse(status_code=200 if ready else 503, content=body)


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
