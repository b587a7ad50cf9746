"""API endpoints for knowledge search."""

from .search import router as search_router
from .documents import router as documents_router
from .sessions import router as sessions_router
from .history import router as history_router
from .health import router as health_router
from .metrics import router as metrics_router

__all__ = [
    "search_router",
    "documents_router",
    "sessions_router",
    "history_router",
    "health_router",
    "metrics_router",
]
