"""Interactive search session: query state, evaluation pipeline and history."""

import asyncio
from typing import Callable, List, Optional, Sequence

import structlog

from ..core.engine import MatchEngine
from ..core.index import IndexManager
from ..core.ranker import Ranker
from ..feed import DocumentFeed, FeedItem, Unsubscribe
from ..history.store import ANONYMOUS, HistoryStore
from ..models.search import MatchResult, RecentQuery, SearchStatus, SessionState
from .debounce import DEFAULT_DEBOUNCE_MS, Debouncer

logger = structlog.get_logger(__name__)

StateListener = Callable[[SessionState], None]


class SearchSession:
    """
    Orchestrates one search overlay from open to close.

    The session owns its index, fed by the document feed while active, and
    records into the injected history store only on explicit submission or
    selection, never on keystrokes.
    """

    def __init__(
        self,
        feed: DocumentFeed,
        history: HistoryStore,
        identity: Optional[str] = None,
        engine: Optional[MatchEngine] = None,
        ranker: Optional[Ranker] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        index: Optional[IndexManager] = None
    ) -> None:
        """
        Initialize the session.

        Args:
            feed: Source of document snapshots
            history: Recent query store
            identity: User identity; None or blank means anonymous
            engine: Match engine (default settings if None)
            ranker: Ranker (the engine's if None)
            debounce_ms: Quiet window before a typed query is evaluated
            index: Index to keep current (a private one if None)
        """
        self.identity = (identity or "").strip() or ANONYMOUS
        self.history = history
        self.engine = engine or MatchEngine()
        self.ranker = ranker or self.engine.ranker
        self.index = index or IndexManager(self.engine.normalizer)
        self.debouncer = Debouncer(debounce_ms)

        self._feed = feed
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: List[StateListener] = []

        self._query = ""
        self._status = SearchStatus.IDLE
        self._results: List[MatchResult] = []
        self._recent: List[RecentQuery] = []

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    @property
    def query(self) -> str:
        return self._query

    @property
    def status(self) -> SearchStatus:
        return self._status

    @property
    def results(self) -> List[MatchResult]:
        return list(self._results)

    @property
    def recent(self) -> List[RecentQuery]:
        return list(self._recent)

    @property
    def state(self) -> SessionState:
        """Everything the session exposes to its UI."""
        return SessionState(
            query=self._query,
            status=self._status,
            results=list(self._results),
            recent=list(self._recent),
            index_ready=self.index.is_ready
        )

    async def activate(self) -> None:
        """Subscribe to the document feed and load recent queries."""
        if self._unsubscribe is None:
            self._unsubscribe = self._feed.subscribe(self._on_snapshot)
        await self.refresh_recent()
        logger.info("Search session activated", identity=self.identity)

    async def deactivate(self) -> None:
        """Release the feed subscription and drop transient state."""
        self.debouncer.close()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._reset_transient()
        logger.info("Search session deactivated", identity=self.identity)

    async def __aenter__(self) -> "SearchSession":
        await self.activate()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.deactivate()

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a callback receiving every new SessionState.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def on_query_change(self, text: str) -> None:
        """
        Handle a keystroke.

        Blank text clears the results immediately; anything else is
        evaluated once typing pauses for the debounce window.
        """
        self._query = text or ""
        query = self._query

        if not query.strip():
            self.debouncer.schedule(query, list, self._apply_results)
            return

        self._set_status(SearchStatus.DEBOUNCING)
        self.debouncer.schedule(query, lambda: self._evaluate(query), self._apply_results)

    async def on_submit(self, text: str) -> SessionState:
        """
        Handle an explicit submission (e.g. Enter).

        The query is evaluated without waiting for the debounce window and
        recorded in history. Blank submissions only clear the results.
        """
        self._query = text or ""
        query = self._query

        if not query.strip():
            self.debouncer.schedule(query, list, self._apply_results)
            return self.state

        await self.debouncer.run_now(query, lambda: self._evaluate(query), self._apply_results)
        await self.history.record(self.identity, query)
        await self.refresh_recent()
        return self.state

    async def on_select(self, document_id: str) -> Optional[MatchResult]:
        """
        Handle the selection of a result.

        The session returns to Idle before the current query is recorded, so
        keystrokes arriving during history I/O start from a clean state and
        are never wiped by this selection.

        Returns:
            The selected result, or None if it was not among the current results
        """
        selected = next((r for r in self._results if r.document_id == document_id), None)
        if selected is None:
            logger.warning("Selected document is not among the results", document_id=document_id)

        query = self._query
        self.debouncer.cancel()
        self._reset_transient()

        await self.history.record(self.identity, query)
        await self.refresh_recent()
        return selected

    def on_close(self) -> None:
        """Dismiss the search without selecting anything. History is untouched."""
        self.debouncer.cancel()
        self._reset_transient()

    async def refresh_recent(self) -> List[RecentQuery]:
        """Reload recent queries from the history store."""
        self._recent = await self.history.list(self.identity)
        self._emit()
        return list(self._recent)

    async def clear_history(self) -> None:
        """Forget every recent query of this session's identity."""
        await self.history.clear(self.identity)
        self._recent = []
        self._emit()

    async def wait_idle(self) -> None:
        """Wait for any pending or running evaluation to settle."""
        await self.debouncer.wait()

    async def _evaluate(self, query: str) -> List[MatchResult]:
        self._set_status(SearchStatus.EVALUATING)
        snapshot = self.index.snapshot
        return self.engine.evaluate(snapshot, query, ranker=self.ranker)

    def _apply_results(self, results: Sequence[MatchResult]) -> None:
        self._results = list(results)
        self._set_status(SearchStatus.RESULTS_READY if self._results else SearchStatus.EMPTY)

    def _on_snapshot(self, documents: Sequence[FeedItem]) -> None:
        self.index.replace(documents)

        if self._query.strip() and self._status is not SearchStatus.IDLE and self._loop_running():
            query = self._query
            self._set_status(SearchStatus.DEBOUNCING)
            self.debouncer.schedule(query, lambda: self._evaluate(query), self._apply_results)
        else:
            self._emit()

    def _reset_transient(self) -> None:
        self._query = ""
        self._results = []
        self._set_status(SearchStatus.IDLE)

    def _set_status(self, status: SearchStatus) -> None:
        self._status = status
        self._emit()

    def _emit(self) -> None:
        if not self._listeners:
            return
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed")

    @staticmethod
    def _loop_running() -> bool:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return True
