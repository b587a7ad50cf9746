"""Domain models shared by the engine, history store and session controller."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Document(BaseModel):
    """A searchable knowledge-base article, as delivered by the document feed."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1, description="Stable unique identifier")
    title: str = Field(default="", description="Article title")
    categories: List[str] = Field(default_factory=list, description="Category names")
    tags: List[str] = Field(default_factory=list, description="Tag names")
    author_name: str = Field(default="", alias="authorName", description="Display name of the author")
    excerpt: str = Field(default="", description="Short summary, may contain markup")
    body: str = Field(default="", alias="content", description="Article body, may contain markup")

    @field_validator("categories", "tags")
    @classmethod
    def dedupe_labels(cls, v: List[str]) -> List[str]:
        """Treat label lists as sets while keeping the feed's order."""
        seen = set()
        labels = []
        for label in v:
            if label and label not in seen:
                seen.add(label)
                labels.append(label)
        return labels


class MatchResult(BaseModel):
    """Outcome of scoring one document against a query."""

    document_id: str = Field(..., description="Matched document id")
    score: float = Field(..., ge=0.0, le=1.0, description="Distance score, 0 is a perfect match")
    matched_fields: Set[str] = Field(default_factory=set, description="Fields with at least one matching word")
    match_types: Dict[str, str] = Field(
        default_factory=dict, description="Best match type per matched field (exact, substring, fuzzy)"
    )
    title: str = Field(default="", description="Document title for display")
    position: int = Field(default=0, ge=0, description="Position of the document in its index snapshot")


class RecentQuery(BaseModel):
    """A query the user explicitly submitted."""

    query_text: str = Field(..., description="Query as typed, trimmed")
    timestamp: datetime = Field(..., description="When the query was last submitted")

    @property
    def dedup_key(self) -> str:
        return self.query_text.strip().casefold()


class SearchStatus(str, Enum):
    """Lifecycle of a search session."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    EVALUATING = "evaluating"
    RESULTS_READY = "results_ready"
    EMPTY = "empty"


class SessionState(BaseModel):
    """Snapshot of everything a search session exposes to its UI."""

    query: str = Field(default="", description="Current transient query text")
    status: SearchStatus = Field(default=SearchStatus.IDLE)
    results: List[MatchResult] = Field(default_factory=list)
    recent: List[RecentQuery] = Field(default_factory=list)
    index_ready: bool = Field(
        default=False, description="False while no documents have been delivered yet"
    )


class HighlightSegment(BaseModel):
    """A run of text that is either highlighted or not."""

    text: str
    highlighted: bool = False
