"""Fuzzy matching of query words against document fields."""

from typing import FrozenSet, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process

EXACT = "exact"
SUBSTRING = "substring"
FUZZY = "fuzzy"

EXACT_SIMILARITY = 1.0
SUBSTRING_SIMILARITY = 0.9
# A fuzzy match must never outrank a verbatim substring.
FUZZY_CEILING = 0.89
# Shorter words only match exactly or as substrings; partial alignment of
# one or two characters is noise.
MIN_PARTIAL_LENGTH = 3
SUGGESTION_CUTOFF = 0.5


class FieldText(NamedTuple):
    """Normalized text of one field value, pre-split into words."""

    text: str
    words: Tuple[str, ...]
    word_set: FrozenSet[str]

    @classmethod
    def from_words(cls, words: Sequence[str]) -> "FieldText":
        words = tuple(words)
        return cls(" ".join(words), words, frozenset(words))


class FuzzyMatcher:
    """Scores how well a single query word matches a field."""

    def __init__(self, threshold: float = 0.3) -> None:
        """
        Initialize the fuzzy matcher.

        Args:
            threshold: Fuzziness tolerance, 0.0 accepts only exact matches and
                1.0 accepts anything. A word matches a field when its
                similarity is at least ``1 - threshold``.
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        self.threshold = threshold
        self.min_similarity = 1.0 - threshold

    def similarity(self, token: str, field: FieldText) -> Tuple[float, Optional[str]]:
        """
        Calculate the similarity of a normalized word to a field value.

        Fuzzy similarities below the match threshold are reported as 0.

        Args:
            token: Normalized query word
            field: Normalized field value

        Returns:
            Tuple of (similarity in [0, 1], match type or None)
        """
        if not token or not field.text:
            return 0.0, None

        if token in field.word_set:
            return EXACT_SIMILARITY, EXACT

        if token in field.text:
            return SUBSTRING_SIMILARITY, SUBSTRING

        cutoff = self.min_similarity * 100

        best = process.extractOne(token, field.words, scorer=fuzz.ratio, score_cutoff=cutoff)
        ratio = best[1] if best else 0.0

        if len(token) >= MIN_PARTIAL_LENGTH:
            ratio = max(ratio, fuzz.partial_ratio(token, field.text, score_cutoff=cutoff))

        similarity = min(ratio / 100.0, FUZZY_CEILING)
        if similarity <= 0.0:
            return 0.0, None

        return similarity, FUZZY

    def best_similarity(
        self,
        token: str,
        values: Iterable[FieldText]
    ) -> Tuple[float, Optional[str]]:
        """
        Best similarity of a word across the values of a (possibly multi-valued) field.

        Args:
            token: Normalized query word
            values: Field values

        Returns:
            Tuple of (similarity, match type or None)
        """
        best_similarity, best_type = 0.0, None

        for value in values:
            similarity, match_type = self.similarity(token, value)
            if similarity > best_similarity:
                best_similarity, best_type = similarity, match_type
                if similarity == EXACT_SIMILARITY:
                    break

        return best_similarity, best_type

    def is_match(self, similarity: float) -> bool:
        """Whether a similarity clears the match threshold."""
        return similarity > 0.0 and similarity >= self.min_similarity

    def suggest_corrections(
        self,
        tokens: Sequence[str],
        candidates: Sequence[str],
        max_suggestions: int = 5
    ) -> List[str]:
        """
        Suggest vocabulary words close to the query words.

        Args:
            tokens: Normalized query words
            candidates: Vocabulary to draw suggestions from
            max_suggestions: Maximum number of suggestions

        Returns:
            List of suggested words, closest first
        """
        if not tokens or not candidates:
            return []

        scored = {}
        for token in tokens:
            for word, score, _ in process.extract(
                token,
                candidates,
                limit=max_suggestions,
                scorer=fuzz.ratio,
                score_cutoff=SUGGESTION_CUTOFF * 100
            ):
                if word != token and score > scored.get(word, 0.0):
                    scored[word] = score

        ranked = sorted(scored.items(), key=lambda item: (-item[1], item[0]))
        return [word for word, _ in ranked[:max_suggestions]]
