"""Push-based document feed."""

from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Union

import structlog

from .models.search import Document

logger = structlog.get_logger(__name__)

FeedItem = Union[Document, Dict[str, Any]]
SnapshotCallback = Callable[[Sequence[FeedItem]], None]
Unsubscribe = Callable[[], None]


class DocumentFeed(Protocol):
    """Delivers a full snapshot of searchable documents on every change."""

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        ...


class InMemoryDocumentFeed:
    """
    DocumentFeed fed by explicit publish() calls.

    New subscribers immediately receive the latest snapshot, if any, the
    way a real-time listener fires once on attach.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[int, SnapshotCallback] = {}
        self._next_token = 0
        self._latest: Optional[List[FeedItem]] = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        """
        Register a snapshot callback.

        Returns:
            Callable that removes the subscription; calling it twice is harmless
        """
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback

        if self._latest is not None:
            callback(list(self._latest))

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, documents: Sequence[FeedItem]) -> None:
        """Deliver a new authoritative snapshot to every subscriber."""
        self._latest = list(documents)
        logger.debug("Publishing document snapshot", total_documents=len(self._latest),
                     subscribers=len(self._subscribers))

        for callback in list(self._subscribers.values()):
            callback(list(self._latest))
