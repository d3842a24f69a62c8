"""Projector base class, JSON column helpers and the projector registry."""

import json
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any

from searchsync.documents.normalizer import clean_text_list
from searchsync.documents.schemas import ProjectedFields
from searchsync.errors import ProjectionError, StoreError, UnrecognizedEntityTypeError


class EntityProjector(ABC):
    """Maps one source row (plus joins) into document fields.

    Subclasses declare the entity type tag and source table, load a row
    by id and map it. fetch() ties the two together and returns None when
    the row is missing or not eligible.

    Attributes:
        entity_type: Tag stored as Document.entity_type.
        table: Source table whose rows this projector reads.
    """

    entity_type: str
    table: str

    @abstractmethod
    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        """Load the source row and its joins, or None if absent/ineligible."""

    @abstractmethod
    def project(self, row: sqlite3.Row) -> ProjectedFields:
        """Map a loaded row into document fields."""

    def source_ids(self, conn: sqlite3.Connection) -> list[int]:
        """Every primary key currently in the source table."""
        return [row[0] for row in conn.execute(f"SELECT id FROM {self.table} ORDER BY id")]

    def fetch(self, conn: sqlite3.Connection, entity_id: int) -> ProjectedFields | None:
        """Load and map one entity.

        Returns:
            Projected fields, or None when the entity is gone.

        Raises:
            ProjectionError: If the row cannot be mapped.
            StoreError: If reading the source row fails.
        """
        try:
            row = self.load(conn, entity_id)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot load {self.entity_type}:{entity_id}: {e}") from e
        if row is None:
            return None
        try:
            return self.project(row)
        except (ValueError, TypeError) as e:
            raise ProjectionError(self.entity_type, entity_id, str(e)) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entity_type={self.entity_type!r}, table={self.table!r})"


def json_value(raw: Any, column: str) -> Any:
    """Decode a JSON text column. None and blank text decode to None.

    Raises:
        ValueError: If the text is not valid JSON.
    """
    if raw is None:
        return None
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"column {column!r} holds malformed JSON: {e.msg}") from e


def json_object(raw: Any, column: str) -> dict[str, Any]:
    """Decode a JSON object column; absent decodes to {}.

    Raises:
        ValueError: If the column holds malformed JSON or a non-object.
    """
    value = json_value(raw, column)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"column {column!r} must hold a JSON object")
    return value


def json_list(raw: Any, column: str) -> list[str]:
    """Decode a JSON array column into cleaned strings; absent decodes to [].

    Raises:
        ValueError: If the column holds malformed JSON or a non-array.
    """
    value = json_value(raw, column)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"column {column!r} must hold a JSON array")
    return clean_text_list(value)


def text_of(value: Any) -> str | None:
    """Render a value from JSON metadata as text, keeping None.

    Non-string values come back as their JSON text, so a nested object
    or a boolean is rendered the way the metadata stores it.

    Examples:
        >>> text_of(310), text_of(True), text_of({"total": None})
        ('310', 'true', '{"total": null}')
    """
    if value is None:
        return None
    return value if isinstance(value, str) else json.dumps(value)


class ProjectorRegistry:
    """Strategy map from entity type tag to projector."""

    def __init__(self, projectors: Iterable[EntityProjector] = ()) -> None:
        self._projectors: dict[str, EntityProjector] = {}
        for projector in projectors:
            self.register(projector)

    def register(self, projector: EntityProjector) -> None:
        """Add a projector.

        Raises:
            ValueError: If the entity type is already registered.
        """
        if projector.entity_type in self._projectors:
            raise ValueError(f"Projector already registered for {projector.entity_type!r}")
        self._projectors[projector.entity_type] = projector

    def get(self, entity_type: str) -> EntityProjector | None:
        """Projector for entity_type, or None if unregistered."""
        return self._projectors.get(entity_type)

    def lookup(self, entity_type: str) -> EntityProjector:
        """Projector for entity_type.

        Raises:
            UnrecognizedEntityTypeError: If no projector is registered.
        """
        projector = self._projectors.get(entity_type)
        if projector is None:
            raise UnrecognizedEntityTypeError(entity_type)
        return projector

    def for_table(self, table: str) -> EntityProjector | None:
        """Projector reading from a source table, or None."""
        for projector in self._projectors.values():
            if projector.table == table:
                return projector
        return None

    @property
    def entity_types(self) -> list[str]:
        """Registered entity types in registration order."""
        return list(self._projectors)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._projectors

    def __iter__(self) -> Iterator[EntityProjector]:
        return iter(self._projectors.values())

    def __len__(self) -> int:
        return len(self._projectors)
