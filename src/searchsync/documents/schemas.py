"""Pydantic models for search documents and projector output."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from searchsync.documents.vector import WeightedTokenIndex


class EntityType(str, Enum):
    """Source entity types the engine projects into documents."""

    COURSES = "courses"
    COMMUNITIES = "communities"
    TUTORS = "tutors"
    TICKETS = "tickets"
    EBOOKS = "ebooks"
    ADS = "ads"
    EVENTS = "events"


class IndexText(BaseModel):
    """Text fed to the summary (tier B) and description (tier C) tiers.

    Usually the document's own summary and description, but some entities
    index a different field than they display (tickets index their category
    as the summary, tutors their headline).
    """

    summary: str | None = None
    description: str | None = None


class KeywordSources(BaseModel):
    """Inputs of the tier D keyword bag.

    Attributes:
        scalars: Single values (category, status, country, names).
        lists: Term lists (skills, languages, audiences).
    """

    scalars: list[str | None] = Field(default_factory=list)
    lists: list[list[str]] = Field(default_factory=list)


class ProjectedFields(BaseModel):
    """Fields a projector maps out of one eligible source row.

    Attributes:
        slug: Public identifier, when the entity has one.
        title: Display title (required).
        subtitle: Secondary display line.
        summary: Short description.
        description: Long description.
        tags: Raw tag values; normalized by the synchronizer.
        filters: Facet fields, already stripped of nulls.
        metadata: Display fields, already stripped of nulls.
        media: Asset URLs, already stripped of nulls.
        index_text: Summary/description text for the weighted index.
        keywords: Keyword bag inputs.
    """

    slug: str | None = None
    title: str
    subtitle: str | None = None
    summary: str | None = None
    description: str | None = None
    tags: list[Any] = Field(default_factory=list)
    filters: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    media: dict[str, Any] = Field(default_factory=dict)
    index_text: IndexText = Field(default_factory=IndexText)
    keywords: KeywordSources = Field(default_factory=KeywordSources)


class Document(BaseModel):
    """Synchronized, queryable projection of one source entity.

    Attributes:
        entity_type: Source entity type tag.
        entity_id: Source primary key.
        slug: Public identifier, when the entity has one.
        title: Display title.
        subtitle: Secondary display line.
        summary: Short description.
        description: Long description.
        tags: Distinct, trimmed, case-sensitive tags.
        filters: Facet fields used for filtering.
        metadata: Denormalized display fields.
        media: Asset URLs.
        search_vector: Weighted token index; opaque to consumers.
        updated_at: Time of the synchronization that wrote this document.
    """

    model_config = ConfigDict(frozen=True)

    entity_type: str
    entity_id: int
    slug: str | None = None
    title: str
    subtitle: str | None = None
    summary: str | None = None
    description: str | None = None
    tags: frozenset[str] = frozenset()
    filters: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    media: dict[str, Any] = Field(default_factory=dict)
    search_vector: WeightedTokenIndex = Field(default_factory=WeightedTokenIndex)
    updated_at: datetime

    @property
    def key(self) -> tuple[str, int]:
        """Composite (entity_type, entity_id) key."""
        return (self.entity_type, self.entity_id)

    def content(self) -> dict[str, Any]:
        """Every field except updated_at, for change comparison."""
        return self.model_dump(exclude={"updated_at"})


class RefreshOutcome(str, Enum):
    """What a single refresh did to the store."""

    UPSERTED = "upserted"
    DELETED = "deleted"


class ResyncReport(BaseModel):
    """Summary of a full or partial resync sweep.

    Attributes:
        entity_types: Entity types swept, in sweep order.
        refreshed: Rows refreshed per entity type.
        upserted: Documents written.
        deleted: Documents removed because their row was ineligible.
        pruned: Orphan documents removed after the sweep.
        started_at: Sweep start time (UTC).
        duration_ms: Wall-clock duration of the sweep.
    """

    entity_types: list[str]
    refreshed: dict[str, int]
    upserted: int = 0
    deleted: int = 0
    pruned: int = 0
    started_at: datetime
    duration_ms: float


class SearchHit(BaseModel):
    """One ranked match.

    Attributes:
        document: Matching document.
        score: bm25 score; lower is more relevant.
    """

    document: Document
    score: float


class SearchResults(BaseModel):
    """Ranked matches with pagination metadata."""

    query: str
    hits: list[SearchHit]
    total: int
    limit: int
    offset: int
