"""SQLite storage shared by source tables and the document store."""

from searchsync.storage.database import Database
from searchsync.storage.schema import create_document_schema, create_source_schema

__all__ = [
    "Database",
    "create_document_schema",
    "create_source_schema",
]
