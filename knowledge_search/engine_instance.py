"""Global search components shared by the API routers."""

from .config import get_settings
from .core.engine import MatchEngine
from .core.index import IndexManager
from .feed import InMemoryDocumentFeed
from .history.storage import InMemoryStorage
from .history.store import HistoryStore
from .session.registry import SessionRegistry

settings = get_settings()

document_feed = InMemoryDocumentFeed()

search_engine = MatchEngine(
    fuzzy_threshold=settings.fuzzy_threshold,
    field_weights=settings.field_weights,
    result_cap=settings.result_cap
)

# Shared index for one-shot searches; sessions keep their own.
index_manager = IndexManager(search_engine.normalizer)

history_store = HistoryStore(
    InMemoryStorage(),
    cap=settings.history_cap,
    retention_days=settings.history_retention_days,
    key_prefix=settings.history_key_prefix
)

session_registry = SessionRegistry(
    feed=document_feed,
    history=history_store,
    engine=search_engine,
    debounce_ms=settings.debounce_ms,
    max_sessions=settings.max_sessions,
    idle_ttl_seconds=settings.session_idle_ttl_seconds
)
