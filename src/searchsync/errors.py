"""Error taxonomy for document synchronization."""


class SyncError(Exception):
    """Base class for synchronization failures.

    Attributes:
        retryable: Whether repeating the failed call may succeed. Every
            refresh step is idempotent, so retrying is always safe.
    """

    retryable = False


class UnrecognizedEntityTypeError(SyncError):
    """No projector is registered for the requested entity type."""

    def __init__(self, entity_type: str) -> None:
        super().__init__(f"No projector registered for entity type {entity_type!r}")
        self.entity_type = entity_type


class ProjectionError(SyncError):
    """A source row could not be mapped into a document."""

    retryable = True

    def __init__(self, entity_type: str, entity_id: int, reason: str) -> None:
        super().__init__(f"Cannot project {entity_type}:{entity_id}: {reason}")
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason


class StoreError(SyncError):
    """The underlying storage rejected a read or write."""

    retryable = True
