"""Wiring of storage, projectors, synchronizer and dispatcher."""

import structlog

from searchsync.config import Settings
from searchsync.documents.store import DocumentStore
from searchsync.projectors import ProjectorRegistry, default_registry
from searchsync.storage import Database, create_document_schema, create_source_schema
from searchsync.sync import ChangeCaptureDispatcher, DocumentSynchronizer

logger = structlog.get_logger()


class SyncEngine:
    """All engine components sharing one database connection.

    Attributes:
        db: Shared database.
        store: Document store.
        registry: Projectors by entity type.
        synchronizer: Refresh/resync orchestrator.
        dispatcher: Change capture entry point for owning modules.
    """

    def __init__(self, settings: Settings, registry: ProjectorRegistry | None = None) -> None:
        """Connect to the database and build every component.

        Args:
            settings: Engine configuration.
            registry: Projector registry (the seven default projectors when None).
        """
        self.db = Database(settings.database_path)
        self.db.connect()
        if settings.bootstrap_source_schema:
            create_source_schema(self.db)
        create_document_schema(self.db)

        self.store = DocumentStore(self.db)
        self.registry = registry if registry is not None else default_registry()
        self.synchronizer = DocumentSynchronizer(
            self.db,
            self.store,
            self.registry,
            unknown_entity_policy=settings.unknown_entity_policy,
            prune_orphans=settings.resync_prune_orphans,
        )
        self.dispatcher = ChangeCaptureDispatcher(self.synchronizer)
        logger.info(
            "engine_ready",
            database=settings.database_path,
            entity_types=self.registry.entity_types,
            unknown_entity_policy=settings.unknown_entity_policy,
        )

    def close(self) -> None:
        """Release the database connection."""
        self.db.close()
