"""Response models for API endpoints."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .search import MatchResult, RecentQuery, SessionState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchResponse(BaseModel):
    """Response for one-shot search queries."""

    query: str = Field(..., description="Original search query")
    category: Optional[str] = Field(None, description="Category filter applied, if any")
    execution_time_ms: float = Field(..., description="Query execution time in milliseconds")
    total_results: int = Field(..., description="Number of results returned")
    results: List[MatchResult] = Field(..., description="Ranked search results")
    suggestions: Optional[List[str]] = Field(None, description="Alternative suggestions if no match")
    index_ready: bool = Field(..., description="Whether any documents were indexed")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")


class SessionResponse(BaseModel):
    """State of one search session."""

    session_id: str = Field(..., description="Session identifier")
    identity: str = Field(..., description="History partition the session records into")
    state: SessionState = Field(..., description="Current session state")


class HistoryResponse(BaseModel):
    """Recent queries of one identity."""

    identity: str = Field(..., description="History partition")
    recent: List[RecentQuery] = Field(..., description="Most recent first")


class FacetCount(BaseModel):
    """How many documents carry a tag or category."""

    name: str
    count: int


class IndexStatsResponse(BaseModel):
    """Statistics of the current index snapshot."""

    total_documents: int = Field(..., description="Documents in the current snapshot")
    version: int = Field(..., description="Number of snapshots delivered so far")
    last_updated: Optional[datetime] = Field(None, description="When the snapshot was swapped in")
    popular_tags: List[FacetCount] = Field(default_factory=list)
    popular_categories: List[FacetCount] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    uptime: float = Field(..., description="Service uptime in seconds")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    dependencies: Dict[str, str] = Field(..., description="Dependency status")


class MetricsResponse(BaseModel):
    """Performance metrics response."""

    total_queries: int = Field(..., description="Total queries processed")
    average_response_time_ms: float = Field(..., description="Average response time")
    match_rate: float = Field(..., description="Share of queries with at least one result")
    active_sessions: int = Field(..., description="Open search sessions")
    indexed_documents: int = Field(..., description="Documents in the shared index")
    memory_usage_mb: float = Field(..., description="Resident memory of the process in MB")
    timestamp: datetime = Field(default_factory=_utcnow, description="Metrics timestamp")
