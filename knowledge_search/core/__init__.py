"""Core search engine functionality."""

from .engine import MatchEngine
from .fuzzy_matcher import FieldText, FuzzyMatcher
from .highlight import highlight
from .index import DocumentIndex, IndexManager, PreparedDocument
from .normalizer import TextNormalizer
from .ranker import Ranker

__all__ = [
    "MatchEngine",
    "FieldText",
    "FuzzyMatcher",
    "highlight",
    "DocumentIndex",
    "IndexManager",
    "PreparedDocument",
    "TextNormalizer",
    "Ranker",
]
