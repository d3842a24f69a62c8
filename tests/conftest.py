"""Pytest configuration and fixtures."""

import json
import sys
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from searchsync.app import create_app
from searchsync.config import Settings
from searchsync.documents.store import DocumentStore
from searchsync.engine import SyncEngine
from searchsync.storage.database import Database
from searchsync.sync import ChangeCaptureDispatcher, DocumentSynchronizer

InsertRow = Callable[..., int]


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 3, 12, 18, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture(autouse=True)
def log_events() -> Iterator[list[dict[str, Any]]]:
    """Capture structlog events instead of printing them."""
    with capture_logs() as events:
        yield events


@pytest.fixture
def settings() -> Settings:
    """Create test settings backed by an in-memory database."""
    return Settings(
        database_path=":memory:",
        bootstrap_source_schema=True,
        debug=True,
    )


@pytest.fixture
def engine(settings: Settings) -> Iterator[SyncEngine]:
    """Engine with source tables and the document table created."""
    engine = SyncEngine(settings)
    yield engine
    engine.close()


@pytest.fixture
def db(engine: SyncEngine) -> Database:
    return engine.db


@pytest.fixture
def store(engine: SyncEngine) -> DocumentStore:
    return engine.store


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def synchronizer(engine: SyncEngine, clock: TickingClock) -> DocumentSynchronizer:
    """Synchronizer with the default registry and a ticking clock."""
    return DocumentSynchronizer(engine.db, engine.store, engine.registry, clock=clock)


@pytest.fixture
def dispatcher(synchronizer: DocumentSynchronizer) -> ChangeCaptureDispatcher:
    return ChangeCaptureDispatcher(synchronizer)


@pytest.fixture
def insert(db: Database) -> InsertRow:
    """Insert a source row; list/dict values are stored as JSON text.

    Returns:
        Callable taking a table name and column values, returning the row id.
    """

    def _insert(table: str, **values: Any) -> int:
        encoded = {
            key: json.dumps(value) if isinstance(value, (list, dict)) else value
            for key, value in values.items()
        }
        columns = ", ".join(encoded)
        placeholders = ", ".join("?" for _ in encoded)
        with db.transaction() as conn:
            cursor = conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                tuple(encoded.values()),
            )
        return cursor.lastrowid

    return _insert


@pytest.fixture
def course_42(insert: InsertRow) -> int:
    """The course from the end-to-end example, with an instructor."""
    insert("users", id=7, first_name="Ada", last_name="Lovelace", email="ada@example.com")
    return insert(
        "courses",
        id=42,
        instructor_id=7,
        slug="intro-to-testing",
        title="Intro to Testing",
        summary=None,
        description="Learn how to write reliable automated checks.",
        tags=["Testing", " testing ", "QA"],
        skills=["pytest", "QA"],
        languages=["en"],
        level="beginner",
        category="engineering",
        price_currency="USD",
        price_amount=4900,
        rating_average=4.7,
        rating_count=120,
        is_published=1,
        thumbnail_url="https://cdn.example.com/c/42/thumb.png",
    )


@pytest.fixture
def client(settings: Settings, engine: SyncEngine) -> TestClient:
    """Create test client serving the test engine."""
    app = create_app(settings, engine=engine)
    return TestClient(app)
