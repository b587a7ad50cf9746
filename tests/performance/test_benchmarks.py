"""Performance benchmarks for Knowledge Search."""

import random

import pytest

from knowledge_search.core.engine import MatchEngine
from knowledge_search.core.index import DocumentIndex, IndexManager
from knowledge_search.models.search import Document

WORDS = [
    "account", "billing", "invoice", "export", "import", "security", "login",
    "password", "webhook", "integration", "report", "dashboard", "team",
    "permission", "notification", "sync", "backup", "release", "api", "token",
]


def make_documents(count, seed=7):
    rng = random.Random(seed)
    documents = []
    for i in range(count):
        title = " ".join(rng.sample(WORDS, 3)).title()
        body = "<p>" + " ".join(rng.choice(WORDS) for _ in range(60)) + "</p>"
        documents.append(Document(
            id=f"doc-{i}",
            title=title,
            categories=rng.sample(WORDS, 2),
            tags=rng.sample(WORDS, 3),
            author_name=f"Author {i % 50}",
            excerpt=" ".join(rng.sample(WORDS, 8)),
            body=body
        ))
    return documents


class TestPerformanceBenchmarks:
    """Performance benchmark tests."""

    @pytest.fixture(scope="class")
    def documents(self):
        """A large set of generated documents."""
        return make_documents(2000)

    @pytest.fixture(scope="class")
    def snapshot(self, documents):
        """Index snapshot of the generated documents."""
        return DocumentIndex(documents)

    @pytest.fixture
    def engine(self):
        """Create a match engine instance for benchmarking."""
        return MatchEngine()

    def test_exact_query_performance(self, engine, snapshot, benchmark):
        """Benchmark a single-word query that matches verbatim."""
        response = benchmark(engine.search, snapshot, "billing")

        assert response.total_results == 8

    def test_typo_query_performance(self, engine, snapshot, benchmark):
        """Benchmark a misspelled query."""
        response = benchmark(engine.search, snapshot, "pasword")

        assert response.total_results > 0

    def test_multi_word_query_performance(self, engine, snapshot, benchmark):
        """Benchmark a conjunctive two-word query."""
        response = benchmark(engine.search, snapshot, "security token")

        assert response.total_results > 0

    def test_no_match_performance(self, engine, snapshot, benchmark):
        """Benchmark a query that matches nothing and falls back to suggestions."""
        response = benchmark(engine.search, snapshot, "qqqzzzx")

        assert response.total_results == 0

    def test_snapshot_build_performance(self, documents, benchmark):
        """Benchmark replacing the index with a full snapshot."""
        manager = IndexManager()

        snapshot = benchmark(manager.replace, documents)

        assert len(snapshot) == 2000
