"""Recent query history API endpoints."""

from fastapi import APIRouter, HTTPException, Path

from ..models.response import HistoryResponse

router = APIRouter(prefix="/api/v1", tags=["history"])

# Import the global history store
from ..engine_instance import history_store


@router.get(
    "/history/{identity}",
    response_model=HistoryResponse,
    summary="Recent queries",
    description="Get the recent queries of an identity, most recent first"
)
async def get_history(
    identity: str = Path(..., description="User identity, 'anonymous' for signed-out users")
) -> HistoryResponse:
    """Get the recent queries of an identity. Expired entries are pruned."""
    try:
        recent = await history_store.list(identity)
        return HistoryResponse(identity=identity, recent=recent)

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get history: {str(e)}"
        )


@router.delete(
    "/history/{identity}",
    status_code=204,
    summary="Clear recent queries",
    description="Forget every recent query of an identity"
)
async def clear_history(
    identity: str = Path(..., description="User identity")
) -> None:
    """Clear the recent queries of an identity."""
    try:
        await history_store.clear(identity)

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to clear history: {str(e)}"
        )
