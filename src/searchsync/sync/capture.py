"""Change capture boundary between source-owning modules and the engine."""

import uuid
from datetime import UTC, datetime
from enum import Enum

import structlog
from pydantic import BaseModel, Field

from searchsync.documents.schemas import RefreshOutcome
from searchsync.sync.synchronizer import DocumentSynchronizer

logger = structlog.get_logger()


class Operation(str, Enum):
    """Kind of source row write that triggered a notification."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class ChangeEvent(BaseModel):
    """One committed-or-committing source row change.

    Attributes:
        id: Unique event identifier (UUID).
        entity_type: Entity type tag of the changed row.
        entity_id: Row id (the new id for insert/update, the old id for delete).
        operation: Write that produced the change.
        timestamp: Notification time (UTC).
    """

    id: str = Field(description="Unique event identifier (UUID)")
    entity_type: str = Field(min_length=1)
    entity_id: int
    operation: Operation
    timestamp: datetime


class ChangeCaptureDispatcher:
    """Delivers source row changes to the synchronizer inline.

    Owning modules call notify() inside the transaction that writes the
    row, before it commits. The refresh runs synchronously on the same
    connection, so any error propagates to the caller and aborts its
    transaction: a source write is never committed without its document.
    """

    def __init__(self, synchronizer: DocumentSynchronizer) -> None:
        """Initialize dispatcher.

        Args:
            synchronizer: Synchronizer that handles every change.
        """
        self._synchronizer = synchronizer
        self._dispatched = 0

    @property
    def dispatched_count(self) -> int:
        """Total number of changes delivered."""
        return self._dispatched

    def notify(
        self,
        entity_type: str,
        operation: Operation | str,
        new_id: int | None = None,
        old_id: int | None = None,
    ) -> ChangeEvent:
        """Report a source row write and refresh its document.

        Args:
            entity_type: Entity type tag of the written row.
            operation: "insert", "update" or "delete".
            new_id: Row id after the write (insert/update).
            old_id: Row id before the write (delete).

        Returns:
            The dispatched change event.

        Raises:
            ValueError: If the id required by the operation is missing.
            SyncError: Anything refresh() raises.
        """
        operation = Operation(operation)
        entity_id = old_id if operation is Operation.DELETE else new_id
        if entity_id is None:
            expected = "old_id" if operation is Operation.DELETE else "new_id"
            raise ValueError(f"{operation.value} notification requires {expected}")

        event = ChangeEvent(
            id=str(uuid.uuid4()),
            entity_type=entity_type,
            entity_id=entity_id,
            operation=operation,
            timestamp=datetime.now(UTC),
        )
        self.dispatch(event)
        return event

    def notify_table(
        self,
        table: str,
        operation: Operation | str,
        new_id: int | None = None,
        old_id: int | None = None,
    ) -> ChangeEvent:
        """Report a write by source table name instead of entity type.

        Tables with no registered projector pass their own name through
        as the entity type, which refresh() then handles per its
        unknown-entity policy.
        """
        projector = self._synchronizer.registry.for_table(table)
        entity_type = projector.entity_type if projector is not None else table
        return self.notify(entity_type, operation, new_id=new_id, old_id=old_id)

    def dispatch(self, event: ChangeEvent) -> RefreshOutcome:
        """Deliver an already-built change event."""
        logger.debug(
            "change_captured",
            event_id=event.id,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            operation=event.operation.value,
        )
        outcome = self._synchronizer.refresh(event.entity_type, event.entity_id)
        self._dispatched += 1
        return outcome
