"""Document snapshot API endpoints."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ..config import get_settings
from ..models.request import DocumentSnapshotRequest
from ..models.response import FacetCount, IndexStatsResponse

router = APIRouter(prefix="/api/v1", tags=["documents"])
settings = get_settings()

# Import the global search components
from ..engine_instance import document_feed, index_manager


@router.put(
    "/documents",
    summary="Replace the document snapshot",
    description="Publish a full snapshot of searchable documents to every subscriber"
)
async def publish_documents(request: DocumentSnapshotRequest) -> JSONResponse:
    """
    Replace every searchable document at once.

    The snapshot is authoritative: documents missing from it disappear
    from search.
    """
    try:
        document_feed.publish(request.documents)

        return JSONResponse(
            status_code=200,
            content={
                "message": "Snapshot published",
                "total_documents": len(index_manager.snapshot),
                "version": index_manager.get_stats()["version"]
            }
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to publish documents: {str(e)}"
        )


@router.get(
    "/documents/stats",
    response_model=IndexStatsResponse,
    summary="Index statistics",
    description="Get statistics and popular tags and categories of the current snapshot"
)
async def document_stats() -> IndexStatsResponse:
    """Get statistics of the shared index snapshot."""
    try:
        snapshot = index_manager.snapshot
        stats = index_manager.get_stats()

        return IndexStatsResponse(
            total_documents=stats["total_documents"],
            version=stats["version"],
            last_updated=stats["last_updated"],
            popular_tags=[
                FacetCount(name=name, count=count)
                for name, count in snapshot.popular_tags(settings.popular_tags_limit)
            ],
            popular_categories=[
                FacetCount(name=name, count=count)
                for name, count in snapshot.popular_categories(settings.popular_categories_limit)
            ]
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get index statistics: {str(e)}"
        )
