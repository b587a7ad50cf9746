"""Unit tests for the in-memory document feed."""

from knowledge_search.feed import InMemoryDocumentFeed


class TestInMemoryDocumentFeed:
    """Test cases for the InMemoryDocumentFeed class."""

    def test_publish_reaches_subscribers(self):
        """Test that every subscriber receives each snapshot."""
        feed = InMemoryDocumentFeed()
        first, second = [], []
        feed.subscribe(first.append)
        feed.subscribe(second.append)

        feed.publish([{"id": "1"}])

        assert first == [[{"id": "1"}]]
        assert second == [[{"id": "1"}]]

    def test_late_subscriber_gets_latest_snapshot(self):
        """Test that subscribing delivers the current snapshot right away."""
        feed = InMemoryDocumentFeed()
        feed.publish([{"id": "1"}])
        feed.publish([{"id": "2"}])

        received = []
        feed.subscribe(received.append)

        assert received == [[{"id": "2"}]]

    def test_no_snapshot_before_first_publish(self):
        """Test subscribing to an empty feed."""
        received = []
        InMemoryDocumentFeed().subscribe(received.append)

        assert received == []

    def test_unsubscribe(self):
        """Test that unsubscribing stops deliveries and is idempotent."""
        feed = InMemoryDocumentFeed()
        received = []
        unsubscribe = feed.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        feed.publish([{"id": "1"}])

        assert received == []
        assert feed.subscriber_count == 0
