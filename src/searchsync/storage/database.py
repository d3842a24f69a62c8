"""SQLite connection wrapper with nestable transactions."""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from searchsync.errors import StoreError

logger = structlog.get_logger()


class Database:
    """Single shared SQLite connection for source tables and documents.

    The connection runs in autocommit mode and transactions are opened
    explicitly. A reentrant lock is held for the lifetime of the outermost
    transaction, so writers on the same connection are serialized and a
    refresh issued from inside an owning module's transaction joins it as
    a savepoint.
    """

    def __init__(self, path: str = ":memory:") -> None:
        """Initialize database wrapper (call connect() before use).

        Args:
            path: SQLite database path, or ":memory:".
        """
        self.path = path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._depth = 0

    def connect(self) -> None:
        """Open the connection and enable foreign keys."""
        with self._lock:
            if self._conn is not None:
                return
            self._conn = sqlite3.connect(
                self.path,
                check_same_thread=False,
                isolation_level=None,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        logger.info("database_connected", path=self.path)

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            StoreError: If connect() has not been called.
        """
        if self._conn is None:
            raise StoreError("Database is not connected")
        return self._conn

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently open on this connection."""
        return self._depth > 0

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Open a transaction, or a savepoint when one is already open.

        Commits (or releases the savepoint) on normal exit and rolls back
        on any exception, which is then re-raised. sqlite3 errors raised
        while beginning or committing are wrapped in StoreError.

        Yields:
            The underlying connection.
        """
        with self._lock:
            conn = self.connection
            savepoint = f"sp_{self._depth}" if self._depth else None
            try:
                conn.execute(f"SAVEPOINT {savepoint}" if savepoint else "BEGIN")
            except sqlite3.Error as e:
                raise StoreError(f"Cannot begin transaction: {e}") from e
            self._depth += 1
            try:
                yield conn
            except BaseException:
                self._depth -= 1
                if conn.in_transaction:
                    if savepoint:
                        conn.execute(f"ROLLBACK TO {savepoint}")
                        conn.execute(f"RELEASE {savepoint}")
                    else:
                        conn.execute("ROLLBACK")
                raise
            self._depth -= 1
            try:
                conn.execute(f"RELEASE {savepoint}" if savepoint else "COMMIT")
            except sqlite3.Error as e:
                if not savepoint and conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise StoreError(f"Cannot commit transaction: {e}") from e

    def executescript(self, script: str) -> None:
        """Run a multi-statement DDL script outside any transaction."""
        with self._lock:
            try:
                self.connection.executescript(script)
            except sqlite3.Error as e:
                raise StoreError(f"Schema script failed: {e}") from e

    def ping(self) -> None:
        """Run a trivial query to prove the connection is usable."""
        with self._lock:
            try:
                self.connection.execute("SELECT 1").fetchone()
            except sqlite3.Error as e:
                raise StoreError(str(e)) from e

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
                logger.info("database_closed", path=self.path)
