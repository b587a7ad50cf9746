"""Open search sessions, keyed by id."""

import time
import uuid
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from ..core.engine import MatchEngine
from ..feed import DocumentFeed
from ..history.store import HistoryStore
from .controller import SearchSession
from .debounce import DEFAULT_DEBOUNCE_MS

logger = structlog.get_logger(__name__)

DEFAULT_MAX_SESSIONS = 1000
DEFAULT_IDLE_TTL_SECONDS = 1800.0


class SessionRegistry:
    """
    Creates, tracks and closes search sessions sharing one feed, engine and history store.

    Sessions abandoned without a close are reclaimed: any session unused for
    longer than the idle TTL is closed on the next open, and opening beyond
    the cap closes the least recently used session first.
    """

    def __init__(
        self,
        feed: DocumentFeed,
        history: HistoryStore,
        engine: MatchEngine,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        idle_ttl_seconds: float = DEFAULT_IDLE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        if idle_ttl_seconds <= 0:
            raise ValueError("idle_ttl_seconds must be positive")

        self.feed = feed
        self.history = history
        self.engine = engine
        self.debounce_ms = debounce_ms
        self.max_sessions = max_sessions
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, SearchSession] = {}
        self._last_used: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def open(self, identity: Optional[str] = None) -> Tuple[str, SearchSession]:
        """
        Open and activate a new session.

        Returns:
            Tuple of (session_id, session)
        """
        await self.evict_idle()
        while len(self._sessions) >= self.max_sessions:
            oldest = min(self._last_used, key=self._last_used.get)
            logger.warning("Session cap reached, closing least recently used", session_id=oldest)
            await self.close(oldest)

        session = SearchSession(
            feed=self.feed,
            history=self.history,
            identity=identity,
            engine=self.engine,
            debounce_ms=self.debounce_ms
        )
        await session.activate()

        session_id = uuid.uuid4().hex
        self._sessions[session_id] = session
        self._last_used[session_id] = self._clock()
        logger.info("Session opened", session_id=session_id, identity=session.identity)
        return session_id, session

    def get(self, session_id: str) -> Optional[SearchSession]:
        """Get an open session by id, marking it as used."""
        session = self._sessions.get(session_id)
        if session is not None:
            self._last_used[session_id] = self._clock()
        return session

    async def close(self, session_id: str) -> bool:
        """
        Close a session without selecting anything.

        Returns:
            True if the session existed
        """
        session = self._sessions.pop(session_id, None)
        self._last_used.pop(session_id, None)
        if session is None:
            return False

        session.on_close()
        await session.deactivate()
        logger.info("Session closed", session_id=session_id)
        return True

    async def evict_idle(self) -> List[str]:
        """
        Close every session unused for longer than the idle TTL.

        Returns:
            Ids of the closed sessions
        """
        now = self._clock()
        expired = [
            session_id for session_id, last_used in self._last_used.items()
            if now - last_used > self.idle_ttl_seconds
        ]
        for session_id in expired:
            await self.close(session_id)

        if expired:
            logger.info("Idle sessions evicted", count=len(expired))
        return expired

    async def close_all(self) -> None:
        """Close every open session."""
        for session_id in list(self._sessions):
            await self.close(session_id)
