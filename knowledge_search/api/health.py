"""Health check API endpoints."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ..config import get_settings
from ..models.response import HealthResponse

router = APIRouter(prefix="/api/v1", tags=["health"])
settings = get_settings()

# Import the global search components
from ..engine_instance import index_manager, search_engine

# Track application start time
app_start_time = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the search service"
)
async def health_check() -> HealthResponse:
    """
    Perform a health check on the search service.

    An empty index is reported as degraded: searches work but return
    nothing until a snapshot arrives.
    """
    try:
        uptime = time.time() - app_start_time

        dependencies = {
            "match_engine": "healthy",
            "index": "healthy" if index_manager.is_ready else "degraded"
        }

        try:
            search_engine.match(index_manager.snapshot, "health")
        except Exception:
            dependencies["match_engine"] = "unhealthy"

        if all(status == "healthy" for status in dependencies.values()):
            status = "healthy"
        elif any(status == "unhealthy" for status in dependencies.values()):
            status = "unhealthy"
        else:
            status = "degraded"

        return HealthResponse(
            status=status,
            version=settings.app_version,
            uptime=uptime,
            dependencies=dependencies
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Health check failed: {str(e)}"
        )


@router.get(
    "/health/ready",
    summary="Readiness check",
    description="Check if a document snapshot has been indexed"
)
async def readiness_check() -> JSONResponse:
    """Ready once the shared index holds at least one document."""
    stats = index_manager.get_stats()
    ready = index_manager.is_ready

    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": _now(),
            "total_documents": stats["total_documents"],
            "version": stats["version"]
        }
    )


@router.get(
    "/health/live",
    summary="Liveness check",
    description="Check if the service is alive and responding"
)
async def liveness_check() -> JSONResponse:
    """Check if the service process is responsive."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "alive",
            "timestamp": _now(),
            "uptime": time.time() - app_start_time
        }
    )
