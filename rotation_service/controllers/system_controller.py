# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics.
Pure HTTP layer — no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rotation_service.core.config import settings
from rotation_service.core.dependencies import get_pool_repo, get_scheduler

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe for Docker and orchestration."""
    pool_repo = get_pool_repo()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "tasks_count": pool_repo.count_tasks(),
        "groups_count": pool_repo.count_groups(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe — verifies the pool is loaded and the scheduler state."""
    pool_repo = get_pool_repo()
    scheduler = get_scheduler()
    return {
        "status": "ready",
        "service": settings.SERVICE_NAME,
        "pool_loaded": pool_repo.count_tasks() + pool_repo.count_groups() > 0,
        "scheduler_running": scheduler.running,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
