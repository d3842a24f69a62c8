"""SQLite-backed keyed persistence for search documents."""

import json
import sqlite3
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import structlog

from searchsync.documents.schemas import Document, SearchHit, SearchResults
from searchsync.documents.vector import TIER_WEIGHTS, WeightedTokenIndex, match_expression
from searchsync.errors import StoreError
from searchsync.storage.database import Database

logger = structlog.get_logger()

_COLUMNS = (
    "entity_type",
    "entity_id",
    "slug",
    "title",
    "subtitle",
    "summary",
    "description",
    "tags",
    "filters",
    "metadata",
    "media",
    "search_vector",
    "updated_at",
)

_UPSERT_SQL = f"""
    INSERT INTO search_documents ({", ".join(_COLUMNS)})
    VALUES ({", ".join("?" for _ in _COLUMNS)})
    ON CONFLICT (entity_type, entity_id) DO UPDATE SET
    {", ".join(f"{c} = excluded.{c}" for c in _COLUMNS[2:])}
"""

_SELECT_SQL = f"SELECT {', '.join(_COLUMNS)} FROM search_documents"

_ROWID_SQL = "SELECT rowid FROM search_documents WHERE entity_type = ? AND entity_id = ?"

_FTS_INSERT_SQL = """
    INSERT INTO search_documents_fts
        (rowid, tier_a, tier_b, tier_c, tier_d, entity_type, entity_id)
    VALUES (?, ?, ?, ?, ?, ?, ?)
"""

_BM25 = f"bm25(search_documents_fts, {', '.join(str(w) for w in TIER_WEIGHTS.values())})"

_SEARCH_SQL = f"""
    SELECT {", ".join(f"d.{c}" for c in _COLUMNS)}, {_BM25} AS score
    FROM search_documents_fts
    JOIN search_documents AS d ON d.rowid = search_documents_fts.rowid
    WHERE search_documents_fts MATCH ?
"""


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as fixed-width UTC ISO text so it sorts lexically."""
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _to_row(document: Document) -> tuple[Any, ...]:
    return (
        document.entity_type,
        document.entity_id,
        document.slug,
        document.title,
        document.subtitle,
        document.summary,
        document.description,
        _dumps(sorted(document.tags)),
        _dumps(document.filters),
        _dumps(document.metadata),
        _dumps(document.media),
        document.search_vector.serialize(),
        format_timestamp(document.updated_at),
    )


def _from_row(row: sqlite3.Row) -> Document:
    return Document(
        entity_type=row["entity_type"],
        entity_id=row["entity_id"],
        slug=row["slug"],
        title=row["title"],
        subtitle=row["subtitle"],
        summary=row["summary"],
        description=row["description"],
        tags=frozenset(json.loads(row["tags"])),
        filters=json.loads(row["filters"]),
        metadata=json.loads(row["metadata"]),
        media=json.loads(row["media"]),
        search_vector=WeightedTokenIndex.parse(row["search_vector"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class DocumentStore:
    """Documents keyed by (entity_type, entity_id).

    Every write runs in a transaction from the shared Database, joining
    the caller's transaction when one is open. This store is the only
    writer of the search_documents table and of its FTS5 index, and it
    changes both in the same transaction.
    """

    def __init__(self, db: Database) -> None:
        """Initialize the store.

        Args:
            db: Connected database that holds the search_documents table.
        """
        self._db = db

    def upsert(self, document: Document) -> None:
        """Insert or fully replace the document at its key.

        Args:
            document: Document to write. Every column is overwritten.

        Raises:
            StoreError: If the write fails.
        """
        try:
            with self._db.transaction() as conn:
                conn.execute(_UPSERT_SQL, _to_row(document))
                (rowid,) = conn.execute(_ROWID_SQL, document.key).fetchone()
                conn.execute("DELETE FROM search_documents_fts WHERE rowid = ?", (rowid,))
                conn.execute(
                    _FTS_INSERT_SQL,
                    (
                        rowid,
                        *document.search_vector.column_text(),
                        document.entity_type,
                        document.entity_id,
                    ),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Upsert failed for {document.entity_type}:{document.entity_id}: {e}") from e
        logger.debug(
            "store_row_written",
            entity_type=document.entity_type,
            entity_id=document.entity_id,
        )

    def delete(self, entity_type: str, entity_id: int) -> bool:
        """Remove the document at a key. Deleting a missing key is a no-op.

        Args:
            entity_type: Entity type tag.
            entity_id: Source primary key.

        Returns:
            True if a document was removed.

        Raises:
            StoreError: If the delete fails.
        """
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    f"DELETE FROM search_documents_fts WHERE rowid IN ({_ROWID_SQL})",
                    (entity_type, entity_id),
                )
                cursor = conn.execute(
                    "DELETE FROM search_documents WHERE entity_type = ? AND entity_id = ?",
                    (entity_type, entity_id),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Delete failed for {entity_type}:{entity_id}: {e}") from e
        removed = cursor.rowcount > 0
        if removed:
            logger.debug("store_row_deleted", entity_type=entity_type, entity_id=entity_id)
        return removed

    def get(self, entity_type: str, entity_id: int) -> Document | None:
        """Fetch one document by key, or None if absent."""
        rows = self._query(
            f"{_SELECT_SQL} WHERE entity_type = ? AND entity_id = ?",
            (entity_type, entity_id),
        )
        return _from_row(rows[0]) if rows else None

    def scan(
        self,
        entity_type: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Document]:
        """List documents ordered by key.

        Args:
            entity_type: Restrict to one entity type.
            limit: Maximum documents to return (all when None).
            offset: Number of documents to skip.

        Returns:
            Documents in (entity_type, entity_id) order.
        """
        sql = _SELECT_SQL
        params: list[Any] = []
        if entity_type is not None:
            sql += " WHERE entity_type = ?"
            params.append(entity_type)
        sql += " ORDER BY entity_type, entity_id LIMIT ? OFFSET ?"
        params.extend([-1 if limit is None else limit, offset])
        return [_from_row(row) for row in self._query(sql, tuple(params))]

    def count(self, entity_type: str | None = None) -> int:
        """Number of stored documents, optionally for one entity type."""
        if entity_type is None:
            rows = self._query("SELECT COUNT(*) FROM search_documents", ())
        else:
            rows = self._query(
                "SELECT COUNT(*) FROM search_documents WHERE entity_type = ?",
                (entity_type,),
            )
        return rows[0][0]

    def prune(self, entity_types: Iterable[str], older_than: datetime) -> int:
        """Delete documents of the given types last written before a time.

        Args:
            entity_types: Entity types to prune.
            older_than: Documents with updated_at strictly earlier are removed.

        Returns:
            Number of documents removed.
        """
        types = list(entity_types)
        if not types:
            return 0
        placeholders = ", ".join("?" for _ in types)
        where = f"WHERE entity_type IN ({placeholders}) AND updated_at < ?"
        params = (*types, format_timestamp(older_than))
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    "DELETE FROM search_documents_fts "
                    f"WHERE rowid IN (SELECT rowid FROM search_documents {where})",
                    params,
                )
                cursor = conn.execute(f"DELETE FROM search_documents {where}", params)
        except sqlite3.Error as e:
            raise StoreError(f"Prune failed: {e}") from e
        return cursor.rowcount

    def search(
        self,
        query: str,
        entity_type: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> SearchResults:
        """Rank documents against free text with bm25 over the tier columns.

        Tier weights come from TIER_WEIGHTS, so for the same term a tier A
        match scores strictly better than a tier B match, and so on down.
        Ties are broken by key.

        Args:
            query: Raw query text, tokenized like document text.
            entity_type: Restrict to one entity type.
            limit: Maximum hits to return.
            offset: Number of hits to skip.

        Returns:
            Hits ordered best first, with the total match count.
        """
        expression = match_expression(query)
        if expression is None:
            return SearchResults(query=query, hits=[], total=0, limit=limit, offset=offset)

        count_sql = "SELECT COUNT(*) FROM search_documents_fts WHERE search_documents_fts MATCH ?"
        search_sql = _SEARCH_SQL
        params: tuple[Any, ...] = (expression,)
        if entity_type is not None:
            count_sql += " AND entity_type = ?"
            search_sql += " AND d.entity_type = ?"
            params += (entity_type,)
        search_sql += " ORDER BY score, d.entity_type, d.entity_id LIMIT ? OFFSET ?"

        total = self._query(count_sql, params)[0][0]
        rows = self._query(search_sql, (*params, limit, offset))
        hits = [SearchHit(document=_from_row(row), score=row["score"]) for row in rows]
        return SearchResults(query=query, hits=hits, total=total, limit=limit, offset=offset)

    def _query(self, sql: str, params: tuple[Any, ...]) -> list[sqlite3.Row]:
        try:
            with self._db.transaction() as conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Document query failed: {e}") from e
