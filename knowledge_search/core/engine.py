"""Weighted multi-field fuzzy match engine."""

import time
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from ..config.settings import DEFAULT_FIELD_WEIGHTS
from ..models.response import SearchResponse
from ..models.search import Document, MatchResult
from .fuzzy_matcher import FuzzyMatcher
from .index import SEARCHABLE_FIELDS, DocumentIndex, PreparedDocument, prepare_document
from .normalizer import TextNormalizer
from .ranker import DEFAULT_RESULT_CAP, Ranker

logger = structlog.get_logger(__name__)


class MatchEngine:
    """Scores documents against a query across weighted fields."""

    def __init__(
        self,
        fuzzy_threshold: float = 0.3,
        field_weights: Optional[Dict[str, float]] = None,
        result_cap: int = DEFAULT_RESULT_CAP
    ) -> None:
        """
        Initialize the match engine.

        Args:
            fuzzy_threshold: Fuzziness tolerance on a 0-1 scale (0 = exact only)
            field_weights: Relative weight of each searchable field, each in (0, 1]
            result_cap: Maximum number of results search() returns
        """
        weights = dict(field_weights if field_weights is not None else DEFAULT_FIELD_WEIGHTS)
        unknown = set(weights) - set(SEARCHABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown fields in weight table: {sorted(unknown)}")
        for field, weight in weights.items():
            if not 0.0 < weight <= 1.0:
                raise ValueError(f"Weight for '{field}' must be in (0, 1], got {weight}")
        if not weights:
            raise ValueError("At least one weighted field is required")

        self.fuzzy_threshold = fuzzy_threshold
        self.field_weights = weights
        self.fuzzy_matcher = FuzzyMatcher(fuzzy_threshold)
        self.normalizer = TextNormalizer()
        self.ranker = Ranker(result_cap)
        self._total_weight = sum(weights.values())

        self._stats = self._empty_stats()

    def tokenize_query(self, query: str) -> List[str]:
        """Split a raw query into normalized words."""
        return self.normalizer.tokenize(query)

    def score(
        self,
        document: Union[PreparedDocument, Document],
        query_tokens: Sequence[str]
    ) -> Optional[MatchResult]:
        """
        Score one document against the query words.

        Every query word must match at least one field, otherwise the
        document is not a match. A field's similarity is the mean, over the
        query words, of the similarities of the words that match it.

        Args:
            document: Prepared (or raw) document
            query_tokens: Normalized query words

        Returns:
            MatchResult, or None when the document does not match
        """
        if not query_tokens:
            return None

        if isinstance(document, Document):
            document = prepare_document(document, normalizer=self.normalizer)

        matched_words = [False] * len(query_tokens)
        field_similarity: Dict[str, float] = {}
        match_types: Dict[str, str] = {}

        for field in self.field_weights:
            values = document.fields.get(field, ())
            if not values:
                continue

            total = 0.0
            best_type, best_similarity = None, 0.0
            for i, token in enumerate(query_tokens):
                similarity, match_type = self.fuzzy_matcher.best_similarity(token, values)
                if not self.fuzzy_matcher.is_match(similarity):
                    continue
                matched_words[i] = True
                total += similarity
                if similarity > best_similarity:
                    best_similarity, best_type = similarity, match_type

            if total > 0.0:
                field_similarity[field] = total / len(query_tokens)
                match_types[field] = best_type

        if not all(matched_words):
            return None

        weighted = sum(self.field_weights[f] * s for f, s in field_similarity.items())
        score = max(0.0, min(1.0, 1.0 - weighted / self._total_weight))

        return MatchResult(
            document_id=document.id,
            score=score,
            matched_fields=set(field_similarity),
            match_types=match_types,
            title=document.document.title,
            position=document.position
        )

    def match(
        self,
        snapshot: DocumentIndex,
        query: Union[str, Sequence[str]],
        category: Optional[str] = None
    ) -> List[MatchResult]:
        """
        Score every document of a snapshot.

        Args:
            snapshot: Index snapshot to scan
            query: Raw query text or pre-tokenized words
            category: Only consider documents filed under this category
                (exact, case-insensitive)

        Returns:
            Matches in snapshot order (unranked)
        """
        tokens = self.tokenize_query(query) if isinstance(query, str) else list(query)
        if not tokens:
            return []

        wanted = (category or "").strip().casefold()

        matches = []
        for document in snapshot:
            if wanted and not any(c.casefold() == wanted for c in document.document.categories):
                continue
            result = self.score(document, tokens)
            if result is not None:
                matches.append(result)

        return matches

    def evaluate(
        self,
        snapshot: DocumentIndex,
        query: Union[str, Sequence[str]],
        ranker: Optional[Ranker] = None,
        max_results: Optional[int] = None,
        category: Optional[str] = None
    ) -> List[MatchResult]:
        """
        Match and rank a query, counting it in the engine statistics.

        Blank queries return nothing and are not counted.

        Args:
            snapshot: Index snapshot to scan
            query: Raw query text or pre-tokenized words
            ranker: Ranker to order results with (the engine's if None)
            max_results: Lower cap for this query
            category: Category filter, see match()

        Returns:
            Ranked results, best first
        """
        start_time = time.time()
        tokens = self.tokenize_query(query) if isinstance(query, str) else list(query)
        if not tokens:
            return []

        ranker = ranker or self.ranker
        results = ranker.rank(self.match(snapshot, tokens, category=category), limit=max_results)

        self._stats["total_queries"] += 1
        if results:
            self._stats["matches"] += 1
        else:
            self._stats["no_matches"] += 1
        self._stats["total_execution_time"] += (time.time() - start_time) * 1000

        return results

    def search(
        self,
        snapshot: DocumentIndex,
        query: str,
        max_results: Optional[int] = None,
        include_suggestions: bool = True,
        category: Optional[str] = None
    ) -> SearchResponse:
        """
        Match, rank and truncate in one call.

        Args:
            snapshot: Index snapshot to scan
            query: Raw query text
            max_results: Lower cap for this query
            include_suggestions: Whether to suggest vocabulary words when nothing matches
            category: Only return documents filed under this category

        Returns:
            SearchResponse with results and metadata
        """
        start_time = time.time()
        query = (query or "").strip()
        category = (category or "").strip() or None
        tokens = self.tokenize_query(query)

        results = self.evaluate(snapshot, tokens, max_results=max_results, category=category)
        suggestions = None

        if tokens and not results and include_suggestions:
            suggestions = self.fuzzy_matcher.suggest_corrections(tokens, snapshot.vocabulary)

        execution_time = (time.time() - start_time) * 1000

        logger.debug(
            "Search completed",
            query=query,
            category=category,
            total_results=len(results),
            execution_time_ms=round(execution_time, 2)
        )

        return SearchResponse(
            query=query,
            category=category,
            execution_time_ms=execution_time,
            total_results=len(results),
            results=results,
            suggestions=suggestions,
            index_ready=len(snapshot) > 0
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        stats = self._stats.copy()

        if stats["total_queries"] > 0:
            stats["average_execution_time_ms"] = (
                stats["total_execution_time"] / stats["total_queries"]
            )
            stats["match_rate"] = stats["matches"] / stats["total_queries"]
            stats["no_match_rate"] = stats["no_matches"] / stats["total_queries"]
        else:
            stats["average_execution_time_ms"] = 0.0
            stats["match_rate"] = 0.0
            stats["no_match_rate"] = 0.0

        return stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "total_queries": 0,
            "matches": 0,
            "no_matches": 0,
            "total_execution_time": 0.0,
        }
