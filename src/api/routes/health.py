"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from config.settings import Settings, get_settings


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Basic health check with data file presence."""
    return {
        "status": "healthy",
        "service": "recommendation-api",
        "environment": settings.environment,
        "checks": {
            "catalog": settings.products_path.exists(),
            "embeddings": settings.embeddings_path.exists(),
        },
    }


@router.get("/ready")
async def readiness_check(settings: Settings = Depends(get_settings)) -> Dict[str, str]:
    """
    Kubernetes-style readiness probe.

    Ready once the catalog and embeddings files are present.
    """
    if not settings.products_path.exists():
        return {"status": "not_ready", "reason": "catalog_missing"}
    if not settings.embeddings_path.exists():
        return {"status": "not_ready", "reason": "embeddings_missing"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Kubernetes-style liveness probe."""
    return {"status": "alive"}
