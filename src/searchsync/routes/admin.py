"""Admin endpoints for refreshing and rebuilding documents."""

import asyncio

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from searchsync.documents.schemas import RefreshOutcome, ResyncReport
from searchsync.engine import SyncEngine
from searchsync.errors import SyncError, UnrecognizedEntityTypeError

logger = structlog.get_logger()

router = APIRouter(prefix="/admin", tags=["admin"])


class ResyncRequest(BaseModel):
    """Request body for a resync sweep."""

    entity_types: list[str] | None = Field(
        default=None,
        description="Entity types to rebuild; all registered types when omitted",
    )
    prune: bool | None = Field(
        default=None,
        description="Remove documents the sweep did not write",
    )


class RefreshResponse(BaseModel):
    """Result of refreshing one document."""

    entity_type: str
    entity_id: int
    outcome: RefreshOutcome


def _http_error(error: SyncError) -> HTTPException:
    if isinstance(error, UnrecognizedEntityTypeError):
        return HTTPException(status_code=404, detail=str(error))
    code = 503 if error.retryable else 500
    return HTTPException(status_code=code, detail=str(error))


@router.post("/resync", response_model=ResyncReport)
async def resync(request: Request, body: ResyncRequest | None = None) -> ResyncReport:
    """Rebuild documents from current source state.

    The sweep runs in a worker thread so the event loop stays responsive.
    """
    engine: SyncEngine = request.app.state.engine
    body = body or ResyncRequest()
    logger.info("admin_resync_requested", entity_types=body.entity_types, prune=body.prune)
    try:
        return await asyncio.to_thread(
            engine.synchronizer.resync_all,
            body.entity_types,
            body.prune,
        )
    except SyncError as e:
        raise _http_error(e) from e


@router.post("/refresh/{entity_type}/{entity_id}", response_model=RefreshResponse)
async def refresh(request: Request, entity_type: str, entity_id: int) -> RefreshResponse:
    """Re-project one entity, as a change notification would."""
    engine: SyncEngine = request.app.state.engine
    try:
        outcome = await asyncio.to_thread(engine.synchronizer.refresh, entity_type, entity_id)
    except SyncError as e:
        raise _http_error(e) from e
    return RefreshResponse(entity_type=entity_type, entity_id=entity_id, outcome=outcome)
