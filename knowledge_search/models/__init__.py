"""Data models for knowledge search."""

from .search import (
    Document,
    HighlightSegment,
    MatchResult,
    RecentQuery,
    SearchStatus,
    SessionState,
)
from .response import (
    SearchResponse,
    SessionResponse,
    HistoryResponse,
    IndexStatsResponse,
    FacetCount,
    ErrorResponse,
    HealthResponse,
    MetricsResponse,
)
from .request import (
    SearchRequest,
    DocumentSnapshotRequest,
    SessionCreateRequest,
    QueryChangeRequest,
    SelectRequest,
)

__all__ = [
    "Document",
    "HighlightSegment",
    "MatchResult",
    "RecentQuery",
    "SearchStatus",
    "SessionState",
    "SearchResponse",
    "SessionResponse",
    "HistoryResponse",
    "IndexStatsResponse",
    "FacetCount",
    "ErrorResponse",
    "HealthResponse",
    "MetricsResponse",
    "SearchRequest",
    "DocumentSnapshotRequest",
    "SessionCreateRequest",
    "QueryChangeRequest",
    "SelectRequest",
]
