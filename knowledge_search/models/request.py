"""Request models for API endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .search import Document


class SearchRequest(BaseModel):
    """Request model for one-shot search queries."""

    query: str = Field(..., min_length=1, max_length=100, description="Search query")
    max_results: Optional[int] = Field(
        None, ge=1, le=100, description="Maximum number of results to return"
    )
    include_suggestions: bool = Field(
        default=True, description="Whether to include suggestions for no-match queries"
    )
    category: Optional[str] = Field(
        None, max_length=100, description="Only return documents filed under this category"
    )

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Validate and normalize query input."""
        if not v or not v.strip():
            raise ValueError("Query cannot be empty")
        return v.strip()


class DocumentSnapshotRequest(BaseModel):
    """A full replacement snapshot of the searchable documents."""

    documents: List[Document] = Field(..., description="Every searchable document")


class SessionCreateRequest(BaseModel):
    """Request model for opening a search session."""

    identity: Optional[str] = Field(
        None, max_length=200, description="Opaque user identity; omitted means anonymous"
    )


class QueryChangeRequest(BaseModel):
    """The text currently in the search box. Blank text is allowed."""

    text: str = Field(default="", max_length=100, description="Current query text")


class SelectRequest(BaseModel):
    """Selection of one result."""

    document_id: str = Field(..., min_length=1, description="Selected document id")
