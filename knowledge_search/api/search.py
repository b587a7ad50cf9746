"""One-shot search API endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Query

from ..config import get_settings
from ..models.request import SearchRequest
from ..models.response import SearchResponse

router = APIRouter(prefix="/api/v1", tags=["search"])
settings = get_settings()

# Import the global search components
from ..engine_instance import index_manager, search_engine


@router.get(
    "/search/{query}",
    response_model=SearchResponse,
    summary="Search documents",
    description="Rank documents against a query with weighted fuzzy matching"
)
async def search_documents(
    query: str = Path(..., description="The query to search for", min_length=1, max_length=100),
    max_results: Optional[int] = Query(
        None,
        ge=1,
        le=100,
        description="Maximum number of results to return (never above the result cap)"
    ),
    include_suggestions: bool = Query(
        True,
        description="Whether to include suggestions for no-match queries"
    ),
    category: Optional[str] = Query(
        None,
        max_length=100,
        description="Only return documents filed under this category (case-insensitive)"
    )
) -> SearchResponse:
    """
    Search the current index snapshot.

    Every word of the query must match some field of a document for it to
    be returned. Results are ordered best first.
    """
    try:
        if len(query) > settings.max_query_length:
            raise HTTPException(
                status_code=400,
                detail=f"Query too long. Maximum length is {settings.max_query_length} characters"
            )

        return search_engine.search(
            index_manager.snapshot,
            query,
            max_results=max_results,
            include_suggestions=include_suggestions,
            category=category
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Search failed: {str(e)}"
        )


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Search with request body",
    description="Search documents using a structured request body"
)
async def search_with_body(request: SearchRequest) -> SearchResponse:
    """Search documents using a JSON request body."""
    try:
        return search_engine.search(
            index_manager.snapshot,
            request.query,
            max_results=request.max_results,
            include_suggestions=request.include_suggestions,
            category=request.category
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Search failed: {str(e)}"
        )


@router.get(
    "/suggestions/{query}",
    response_model=list[str],
    summary="Get search suggestions",
    description="Get vocabulary words close to a misspelled query"
)
async def get_suggestions(
    query: str = Path(..., description="The query to get suggestions for", min_length=1),
    max_suggestions: int = Query(5, ge=1, le=20, description="Maximum number of suggestions")
) -> list[str]:
    """Suggest words from titles, tags and categories of the indexed documents."""
    try:
        tokens = search_engine.tokenize_query(query)
        return search_engine.fuzzy_matcher.suggest_corrections(
            tokens, index_manager.snapshot.vocabulary, max_suggestions
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get suggestions: {str(e)}"
        )
