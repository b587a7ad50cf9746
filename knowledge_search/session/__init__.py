"""Search session orchestration."""

from .controller import SearchSession
from .debounce import Debouncer
from .registry import SessionRegistry

__all__ = ["SearchSession", "Debouncer", "SessionRegistry"]
