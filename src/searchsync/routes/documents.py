"""Read-only document endpoints for downstream query services."""

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from searchsync.documents.schemas import Document
from searchsync.engine import SyncEngine

router = APIRouter(prefix="/documents", tags=["documents"])


class DocumentPage(BaseModel):
    """Paginated document listing.

    Attributes:
        documents: Documents in key order.
        total: Total documents matching the filter.
        limit: Maximum documents per page.
        offset: Number of documents skipped.
    """

    documents: list[Document]
    total: int
    limit: int
    offset: int


@router.get("", response_model=DocumentPage, summary="List synchronized documents")
async def list_documents(
    request: Request,
    entity_type: str | None = Query(default=None, description="Filter by entity type"),
    limit: int = Query(default=50, ge=1, le=500, description="Documents per page"),
    offset: int = Query(default=0, ge=0, description="Documents to skip"),
) -> DocumentPage:
    """Scan documents in (entity_type, entity_id) order."""
    engine: SyncEngine = request.app.state.engine
    return DocumentPage(
        documents=engine.store.scan(entity_type=entity_type, limit=limit, offset=offset),
        total=engine.store.count(entity_type),
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{entity_type}/{entity_id}",
    response_model=Document,
    summary="Fetch one synchronized document",
)
async def get_document(request: Request, entity_type: str, entity_id: int) -> Document:
    """Fetch the document for one source entity.

    Raises:
        HTTPException: 404 if no document exists at that key.
    """
    engine: SyncEngine = request.app.state.engine
    document = engine.store.get(entity_type, entity_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"No document for {entity_type}:{entity_id}")
    return document
