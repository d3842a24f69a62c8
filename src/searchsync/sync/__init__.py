"""Document synchronization and change capture."""

from searchsync.sync.capture import ChangeCaptureDispatcher, ChangeEvent, Operation
from searchsync.sync.synchronizer import DocumentSynchronizer, build_document

__all__ = [
    "ChangeCaptureDispatcher",
    "ChangeEvent",
    "DocumentSynchronizer",
    "Operation",
    "build_document",
]
