"""Refresh and resync orchestration for search documents."""

import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Literal

import structlog

from searchsync.documents.normalizer import build_keyword_bag, normalize_text_list
from searchsync.documents.schemas import Document, ProjectedFields, RefreshOutcome, ResyncReport
from searchsync.documents.store import DocumentStore
from searchsync.documents.vector import build_search_vector
from searchsync.errors import UnrecognizedEntityTypeError
from searchsync.projectors.base import ProjectorRegistry
from searchsync.storage.database import Database

logger = structlog.get_logger()

UnknownEntityPolicy = Literal["delete", "raise"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def build_document(
    entity_type: str,
    entity_id: int,
    fields: ProjectedFields,
    updated_at: datetime,
) -> Document:
    """Turn projector output into a document.

    Normalizes the tags, folds the keyword sources into a bag and builds
    the weighted index; nothing else decides relevance weighting.
    """
    tags = normalize_text_list(fields.tags)
    keyword_bag = build_keyword_bag(fields.keywords.scalars, fields.keywords.lists)
    vector = build_search_vector(
        fields.title,
        fields.index_text.summary,
        fields.index_text.description,
        tags,
        keyword_bag,
    )
    return Document(
        entity_type=entity_type,
        entity_id=entity_id,
        slug=fields.slug,
        title=fields.title,
        subtitle=fields.subtitle,
        summary=fields.summary,
        description=fields.description,
        tags=frozenset(tags),
        filters=fields.filters,
        metadata=fields.metadata,
        media=fields.media,
        search_vector=vector,
        updated_at=updated_at,
    )


class DocumentSynchronizer:
    """Keeps search documents in step with their source rows.

    refresh() is the only write path: it projects one entity and upserts
    or deletes its document. resync_all() replays refresh() over every
    source row. Both are idempotent, so any failure can be retried.

    Attributes:
        unknown_entity_policy: "delete" removes the document at a key whose
            entity type has no projector; "raise" refuses without touching
            the store.
    """

    def __init__(
        self,
        db: Database,
        store: DocumentStore,
        registry: ProjectorRegistry,
        unknown_entity_policy: UnknownEntityPolicy = "delete",
        prune_orphans: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize synchronizer.

        Args:
            db: Database holding the source tables and documents.
            store: Document store to write to.
            registry: Projectors by entity type.
            unknown_entity_policy: Behavior for unregistered entity types.
            prune_orphans: Default for resync_all(prune=...).
            clock: Source of updated_at timestamps.
        """
        self._db = db
        self._store = store
        self._registry = registry
        self.unknown_entity_policy = unknown_entity_policy
        self._prune_orphans = prune_orphans
        self._clock = clock

    @property
    def registry(self) -> ProjectorRegistry:
        """Projectors this synchronizer dispatches to."""
        return self._registry

    def refresh(self, entity_type: str, entity_id: int) -> RefreshOutcome:
        """Re-project one entity and write or remove its document.

        Runs in its own transaction, or as a savepoint inside the caller's
        open transaction, so a failure here rolls back with the caller's
        source write.

        Args:
            entity_type: Entity type tag.
            entity_id: Source primary key.

        Returns:
            UPSERTED if a document was written, DELETED otherwise.

        Raises:
            UnrecognizedEntityTypeError: Unregistered type under the
                "raise" policy.
            ProjectionError: The row could not be mapped (retryable).
            StoreError: Storage failed (retryable).
        """
        projector = self._registry.get(entity_type)
        if projector is None:
            if self.unknown_entity_policy == "raise":
                logger.error(
                    "unknown_entity_type_rejected",
                    entity_type=entity_type,
                    entity_id=entity_id,
                )
                raise UnrecognizedEntityTypeError(entity_type)
            removed = self._store.delete(entity_type, entity_id)
            logger.warning(
                "unknown_entity_type_deleted",
                entity_type=entity_type,
                entity_id=entity_id,
                removed=removed,
            )
            return RefreshOutcome.DELETED

        with self._db.transaction() as conn:
            fields = projector.fetch(conn, entity_id)
            if fields is None:
                removed = self._store.delete(entity_type, entity_id)
                logger.info(
                    "document_deleted",
                    entity_type=entity_type,
                    entity_id=entity_id,
                    removed=removed,
                )
                return RefreshOutcome.DELETED

            document = build_document(entity_type, entity_id, fields, self._clock())
            self._store.upsert(document)

        logger.info("document_upserted", entity_type=entity_type, entity_id=entity_id)
        return RefreshOutcome.UPSERTED

    def resync_all(
        self,
        entity_types: Iterable[str] | None = None,
        prune: bool | None = None,
    ) -> ResyncReport:
        """Rebuild documents from every row of every source table.

        Source ids are snapshotted per entity type and each id is
        refreshed in its own transaction, so live refreshes may interleave
        with the sweep. A key refreshed by a live write mid-sweep is not
        revisited.

        Args:
            entity_types: Restrict the sweep to these types (all registered
                types when None).
            prune: Delete documents of the swept types that the sweep did
                not write. Defaults to the configured prune_orphans.

        Returns:
            Report with per-type counts and timing.

        Raises:
            UnrecognizedEntityTypeError: If a requested type is unregistered.
        """
        types = list(entity_types) if entity_types is not None else self._registry.entity_types
        projectors = [self._registry.lookup(t) for t in types]
        prune = self._prune_orphans if prune is None else prune

        started_at = self._clock()
        start = time.perf_counter()
        logger.info("resync_started", entity_types=types, prune=prune)

        refreshed: dict[str, int] = {}
        upserted = deleted = 0
        for projector in projectors:
            with self._db.transaction() as conn:
                ids = projector.source_ids(conn)
            for entity_id in ids:
                if self.refresh(projector.entity_type, entity_id) is RefreshOutcome.UPSERTED:
                    upserted += 1
                else:
                    deleted += 1
            refreshed[projector.entity_type] = len(ids)
            logger.info(
                "resync_entity_type_completed",
                entity_type=projector.entity_type,
                count=len(ids),
            )

        pruned = self._store.prune(types, older_than=started_at) if prune else 0

        report = ResyncReport(
            entity_types=types,
            refreshed=refreshed,
            upserted=upserted,
            deleted=deleted,
            pruned=pruned,
            started_at=started_at,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        logger.info(
            "resync_completed",
            upserted=upserted,
            deleted=deleted,
            pruned=pruned,
            duration_ms=report.duration_ms,
        )
        return report

    def resync_entity_type(self, entity_type: str, prune: bool | None = None) -> ResyncReport:
        """Rebuild documents for a single entity type."""
        return self.resync_all([entity_type], prune=prune)
