"""In-memory document index snapshots."""

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

import structlog
from pydantic import ValidationError

from ..models.search import Document
from .fuzzy_matcher import FieldText
from .normalizer import TextNormalizer

logger = structlog.get_logger(__name__)

SEARCHABLE_FIELDS = ("title", "categories", "tags", "author_name", "excerpt", "body")
MULTI_VALUED_FIELDS = frozenset({"categories", "tags"})
MARKUP_FIELDS = frozenset({"excerpt", "body"})
# Fields whose words make up the suggestion vocabulary.
VOCABULARY_FIELDS = ("title", "categories", "tags")


class PreparedDocument(NamedTuple):
    """A document with every searchable field normalized once per snapshot."""

    document: Document
    position: int
    fields: Dict[str, Tuple[FieldText, ...]]

    @property
    def id(self) -> str:
        return self.document.id


def prepare_document(
    document: Document,
    position: int = 0,
    normalizer: Optional[TextNormalizer] = None
) -> PreparedDocument:
    """
    Normalize the searchable fields of a document.

    Args:
        document: Document to prepare
        position: Position of the document in its snapshot
        normalizer: Normalizer to use (a fresh one if None)

    Returns:
        PreparedDocument
    """
    normalizer = normalizer or TextNormalizer()
    fields: Dict[str, Tuple[FieldText, ...]] = {}

    for field in SEARCHABLE_FIELDS:
        raw = getattr(document, field)
        values = raw if field in MULTI_VALUED_FIELDS else [raw]
        prepared = []
        for value in values:
            words = normalizer.tokenize(value, markup=field in MARKUP_FIELDS)
            if words:
                prepared.append(FieldText.from_words(words))
        fields[field] = tuple(prepared)

    return PreparedDocument(document=document, position=position, fields=fields)


class DocumentIndex:
    """Immutable snapshot of the searchable documents."""

    def __init__(
        self,
        documents: Sequence[Document] = (),
        normalizer: Optional[TextNormalizer] = None,
        version: int = 0
    ) -> None:
        """
        Build a snapshot.

        Args:
            documents: Documents in feed order; later duplicates of an id are dropped
            normalizer: Normalizer used to prepare fields
            version: Sequence number of the snapshot
        """
        normalizer = normalizer or TextNormalizer()
        prepared: List[PreparedDocument] = []
        by_id: Dict[str, PreparedDocument] = {}

        for document in documents:
            if document.id in by_id:
                logger.warning("Duplicate document id in snapshot", document_id=document.id)
                continue
            entry = prepare_document(document, len(prepared), normalizer)
            prepared.append(entry)
            by_id[document.id] = entry

        self._documents: Tuple[PreparedDocument, ...] = tuple(prepared)
        self._by_id = by_id
        self._vocabulary: Optional[Tuple[str, ...]] = None
        self.version = version
        self.created_at = datetime.now(timezone.utc)

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[PreparedDocument]:
        return iter(self._documents)

    def get(self, document_id: str) -> Optional[PreparedDocument]:
        """Get a prepared document by id."""
        return self._by_id.get(document_id)

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        """Distinct words of titles, tags and categories, in first-seen order."""
        if self._vocabulary is None:
            words: Dict[str, None] = {}
            for entry in self._documents:
                for field in VOCABULARY_FIELDS:
                    for value in entry.fields[field]:
                        for word in value.words:
                            words.setdefault(word, None)
            self._vocabulary = tuple(words)
        return self._vocabulary

    def popular_tags(self, limit: int = 10) -> List[Tuple[str, int]]:
        """Tags ordered by how many documents carry them."""
        return self._popular("tags", limit)

    def popular_categories(self, limit: int = 8) -> List[Tuple[str, int]]:
        """Categories ordered by how many documents carry them."""
        return self._popular("categories", limit)

    def _popular(self, field: str, limit: int) -> List[Tuple[str, int]]:
        counts: Counter = Counter()
        for entry in self._documents:
            counts.update(getattr(entry.document, field))
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]


class IndexManager:
    """Owns the current snapshot and replaces it wholesale on every feed delivery."""

    def __init__(self, normalizer: Optional[TextNormalizer] = None) -> None:
        """Initialize the index manager with an empty snapshot."""
        self.normalizer = normalizer or TextNormalizer()
        self._snapshot = DocumentIndex((), self.normalizer)
        self._version = 0
        self._last_updated: Optional[datetime] = None

    @property
    def snapshot(self) -> DocumentIndex:
        """The current snapshot. Callers keep a consistent view by holding the reference."""
        return self._snapshot

    @property
    def is_ready(self) -> bool:
        """Whether any documents are available to search."""
        return len(self._snapshot) > 0

    def replace(self, documents: Iterable[Union[Document, Dict[str, Any]]]) -> DocumentIndex:
        """
        Build a new snapshot from a full feed delivery and swap it in.

        Items that are not valid documents are skipped with a warning.

        Args:
            documents: Every searchable document

        Returns:
            The new snapshot
        """
        valid: List[Document] = []
        for item in documents:
            if isinstance(item, Document):
                valid.append(item)
                continue
            try:
                valid.append(Document.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping invalid document", error_count=exc.error_count())

        self._version += 1
        snapshot = DocumentIndex(valid, self.normalizer, version=self._version)

        # Single reference assignment; in-flight scans keep the old snapshot.
        self._snapshot = snapshot
        self._last_updated = snapshot.created_at

        logger.info("Index snapshot replaced", version=self._version, total_documents=len(snapshot))
        return snapshot

    def clear(self) -> None:
        """Swap in an empty snapshot."""
        self.replace(())

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics of the current snapshot."""
        return {
            "total_documents": len(self._snapshot),
            "version": self._version,
            "last_updated": self._last_updated,
        }
