"""Word-boundary highlighting of query words in display text."""

import re
from typing import List, Optional

from ..models.search import HighlightSegment
from .normalizer import TextNormalizer


def highlight(
    text: str,
    query: str,
    markup: bool = False,
    normalizer: Optional[TextNormalizer] = None
) -> List[HighlightSegment]:
    """
    Split text into highlighted and plain segments.

    Each query word is matched case-insensitively on word boundaries, so
    "act" does not highlight inside "react". The original casing of the text
    is kept. This never affects scoring.

    Args:
        text: Display text (or markup when ``markup`` is set)
        query: Raw query text
        markup: Strip markup from ``text`` first
        normalizer: Normalizer used for the query words

    Returns:
        Segments whose concatenated text equals the (stripped) input text
    """
    normalizer = normalizer or TextNormalizer()

    if markup:
        text = " ".join(normalizer.strip_markup(text).split())

    if not text:
        return []

    words = sorted(set(normalizer.tokenize(query)), key=lambda w: (-len(w), w))
    if not words:
        return [HighlightSegment(text=text)]

    pattern = re.compile(
        r"(?<!\w)(" + "|".join(re.escape(w) for w in words) + r")(?!\w)",
        re.IGNORECASE
    )

    segments: List[HighlightSegment] = []
    cursor = 0
    for found in pattern.finditer(text):
        if found.start() > cursor:
            segments.append(HighlightSegment(text=text[cursor:found.start()]))
        segments.append(HighlightSegment(text=found.group(0), highlighted=True))
        cursor = found.end()

    if cursor < len(text):
        segments.append(HighlightSegment(text=text[cursor:]))

    return segments
