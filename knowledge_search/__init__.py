"""
Knowledge Search - interactive fuzzy search over knowledge base documents.

Ranks documents against free-text queries across weighted fields, debounces
keystrokes, and keeps a short per-user history of submitted queries.
"""

__version__ = "1.0.0"

from .core.engine import MatchEngine
from .core.index import DocumentIndex, IndexManager
from .feed import InMemoryDocumentFeed
from .history.store import HistoryStore
from .models.search import Document, MatchResult, RecentQuery, SearchStatus, SessionState
from .session.controller import SearchSession

__all__ = [
    "MatchEngine",
    "DocumentIndex",
    "IndexManager",
    "InMemoryDocumentFeed",
    "HistoryStore",
    "Document",
    "MatchResult",
    "RecentQuery",
    "SearchStatus",
    "SessionState",
    "SearchSession",
]
