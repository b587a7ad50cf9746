"""Metrics API endpoints."""

import psutil

from fastapi import APIRouter, HTTPException

from ..models.response import MetricsResponse

router = APIRouter(prefix="/api/v1", tags=["metrics"])

# Import the global search components
from ..engine_instance import index_manager, search_engine, session_registry


@router.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Get performance metrics",
    description="Get query statistics, open sessions and process memory usage"
)
async def get_metrics() -> MetricsResponse:
    """Get performance metrics of the search service."""
    try:
        stats = search_engine.get_stats()

        memory_usage_mb = psutil.Process().memory_info().rss / (1024 * 1024)

        return MetricsResponse(
            total_queries=stats["total_queries"],
            average_response_time_ms=stats["average_execution_time_ms"],
            match_rate=stats["match_rate"],
            active_sessions=len(session_registry),
            indexed_documents=len(index_manager.snapshot),
            memory_usage_mb=memory_usage_mb
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get metrics: {str(e)}"
        )
