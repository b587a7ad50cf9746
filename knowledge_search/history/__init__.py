"""Recent query history."""

from .storage import InMemoryStorage, KeyValueStorage
from .store import ANONYMOUS, HistoryStore

__all__ = ["InMemoryStorage", "KeyValueStorage", "ANONYMOUS", "HistoryStore"]
