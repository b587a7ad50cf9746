"""Interactive search session API endpoints."""

from fastapi import APIRouter, HTTPException, Path
from fastapi.responses import JSONResponse

from ..models.request import QueryChangeRequest, SelectRequest, SessionCreateRequest
from ..models.response import SessionResponse
from ..session.controller import SearchSession

router = APIRouter(prefix="/api/v1", tags=["sessions"])

# Import the global session registry
from ..engine_instance import session_registry


def _get_session(session_id: str) -> SearchSession:
    session = session_registry.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=404,
            detail=f"Session '{session_id}' not found"
        )
    return session


def _to_response(session_id: str, session: SearchSession) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        identity=session.identity,
        state=session.state
    )


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    summary="Open a search session",
    description="Open a search overlay for an identity and load its recent queries"
)
async def open_session(request: SessionCreateRequest) -> SessionResponse:
    """
    Open a search session.

    The session subscribes to the document feed and starts in the Idle
    state with the identity's recent queries.
    """
    try:
        session_id, session = await session_registry.open(request.identity)
        return _to_response(session_id, session)

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to open session: {str(e)}"
        )


@router.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    summary="Get session state",
    description="Get the query, status, results and recent queries of a session"
)
async def get_session(
    session_id: str = Path(..., description="Session identifier")
) -> SessionResponse:
    """Get the current state of a session."""
    session = _get_session(session_id)
    return _to_response(session_id, session)


@router.post(
    "/sessions/{session_id}/query",
    response_model=SessionResponse,
    summary="Change the query text",
    description="Report a keystroke; evaluation runs once typing pauses"
)
async def change_query(
    request: QueryChangeRequest,
    session_id: str = Path(..., description="Session identifier")
) -> SessionResponse:
    """
    Report the text currently in the search box.

    The returned state is usually Debouncing; poll the session to get the
    results once the debounce window has passed.
    """
    session = _get_session(session_id)
    try:
        session.on_query_change(request.text)
        return _to_response(session_id, session)

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Query change failed: {str(e)}"
        )


@router.post(
    "/sessions/{session_id}/submit",
    response_model=SessionResponse,
    summary="Submit the query",
    description="Evaluate the query immediately and record it in recent queries"
)
async def submit_query(
    request: QueryChangeRequest,
    session_id: str = Path(..., description="Session identifier")
) -> SessionResponse:
    """Submit a query explicitly, skipping the debounce window."""
    session = _get_session(session_id)
    try:
        await session.on_submit(request.text)
        return _to_response(session_id, session)

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Submit failed: {str(e)}"
        )


@router.post(
    "/sessions/{session_id}/select",
    summary="Select a result",
    description="Select a result, record the query and return the session to Idle"
)
async def select_result(
    request: SelectRequest,
    session_id: str = Path(..., description="Session identifier")
) -> JSONResponse:
    """Select a result of the current query."""
    session = _get_session(session_id)
    try:
        selected = await session.on_select(request.document_id)

        return JSONResponse(
            status_code=200,
            content={
                "session_id": session_id,
                "selected": selected.model_dump(mode="json") if selected else None,
                "state": session.state.model_dump(mode="json")
            }
        )

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Selection failed: {str(e)}"
        )


@router.delete(
    "/sessions/{session_id}",
    status_code=204,
    summary="Close a session",
    description="Dismiss the search without selecting anything"
)
async def close_session(
    session_id: str = Path(..., description="Session identifier")
) -> None:
    """Close a session and release its feed subscription. History is untouched."""
    if not await session_registry.close(session_id):
        raise HTTPException(
            status_code=404,
            detail=f"Session '{session_id}' not found"
        )
