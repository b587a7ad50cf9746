"""Ordering and truncation of match results."""

from typing import Iterable, List, Optional, Tuple

from ..models.search import MatchResult
from .fuzzy_matcher import EXACT, FUZZY, SUBSTRING

DEFAULT_RESULT_CAP = 8

# Scores are rounded before comparison so float noise never decides order.
SCORE_PRECISION = 9

_TITLE_MATCH_RANK = {EXACT: 0, SUBSTRING: 0, FUZZY: 1}
_NO_TITLE_MATCH_RANK = 2


class Ranker:
    """Orders match results best first and keeps the top ones."""

    def __init__(self, result_cap: int = DEFAULT_RESULT_CAP) -> None:
        """
        Initialize the ranker.

        Args:
            result_cap: Maximum number of results returned by rank()
        """
        if result_cap < 1:
            raise ValueError(f"result_cap must be positive, got {result_cap}")
        self.result_cap = result_cap

    def rank(self, matches: Iterable[MatchResult], limit: Optional[int] = None) -> List[MatchResult]:
        """
        Sort matches by score, break ties deterministically and truncate.

        Ties on score prefer an exact or substring title match over a fuzzy
        one, then the document's position in its snapshot.

        Args:
            matches: Unordered match results
            limit: Lower cap for this call; never raises the configured cap

        Returns:
            At most ``result_cap`` results, best first
        """
        cap = self.result_cap if limit is None else max(0, min(limit, self.result_cap))
        ordered = sorted(matches, key=self.sort_key)
        return ordered[:cap]

    @staticmethod
    def sort_key(match: MatchResult) -> Tuple[float, int, int]:
        title_rank = _TITLE_MATCH_RANK.get(match.match_types.get("title"), _NO_TITLE_MATCH_RANK)
        return round(match.score, SCORE_PRECISION), title_rank, match.position
