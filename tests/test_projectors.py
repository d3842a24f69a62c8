"""Per-entity projection tests."""

from typing import Any

import pytest

from searchsync.documents.normalizer import build_keyword_bag
from searchsync.documents.schemas import EntityType, ProjectedFields
from searchsync.engine import SyncEngine
from searchsync.errors import ProjectionError, UnrecognizedEntityTypeError
from searchsync.projectors import ProjectorRegistry, default_registry
from searchsync.projectors.courses import CourseProjector
from searchsync.sync import DocumentSynchronizer


def fetch(engine: SyncEngine, entity_type: str, entity_id: int) -> ProjectedFields | None:
    projector = engine.registry.lookup(entity_type)
    with engine.db.transaction() as conn:
        return projector.fetch(conn, entity_id)


def assert_no_nulls(value: Any) -> None:
    if isinstance(value, dict):
        for item in value.values():
            assert item is not None
            assert_no_nulls(item)
    elif isinstance(value, list):
        for item in value:
            assert item is not None


def test_default_registry_covers_every_entity_type() -> None:
    registry = default_registry()
    assert set(registry.entity_types) == {t.value for t in EntityType}
    assert registry.for_table("tutor_profiles").entity_type == "tutors"
    assert registry.for_table("learner_support_cases").entity_type == "tickets"
    assert registry.for_table("nope") is None


def test_registry_lookup_of_unknown_type_is_an_error() -> None:
    with pytest.raises(UnrecognizedEntityTypeError) as excinfo:
        default_registry().lookup("unknown_type")
    assert excinfo.value.entity_type == "unknown_type"
    assert "unknown_type" not in default_registry()


def test_registry_rejects_duplicate_registration() -> None:
    registry = ProjectorRegistry([CourseProjector()])
    with pytest.raises(ValueError):
        registry.register(CourseProjector())


def test_course_projection(engine: SyncEngine, course_42: int) -> None:
    fields = fetch(engine, "courses", course_42)

    assert fields.title == "Intro to Testing"
    assert fields.subtitle == "Ada Lovelace"
    assert fields.slug == "intro-to-testing"
    assert fields.summary is None
    assert fields.tags == ["Testing", "testing", "QA"]
    assert fields.filters == {
        "level": "beginner",
        "category": "engineering",
        "price.currency": "USD",
        "price.amount": 4900,
        "languages": ["en"],
        "skills": ["pytest", "QA"],
        "tags": ["Testing", "testing", "QA"],
    }
    assert fields.metadata == {
        "instructorName": "Ada Lovelace",
        "price": {"currency": "USD", "amount": 4900},
        "rating": {"average": 4.7, "count": 120},
        "isPublished": True,
        "category": "engineering",
        "level": "beginner",
    }
    assert fields.media == {"thumbnailUrl": "https://cdn.example.com/c/42/thumb.png"}
    assert fields.keywords.scalars == ["Ada Lovelace", "engineering", "beginner"]
    assert fields.keywords.lists == [["QA", "Testing", "en", "pytest", "testing"]]


def test_course_without_instructor(engine: SyncEngine, insert) -> None:
    course_id = insert("courses", title="Solo", tags=None)
    fields = fetch(engine, "courses", course_id)
    assert fields.subtitle is None
    assert "instructorName" not in fields.metadata
    assert fields.tags == []
    assert_no_nulls(fields.metadata)


def test_missing_row_projects_absent(engine: SyncEngine) -> None:
    for entity_type in default_registry().entity_types:
        assert fetch(engine, entity_type, 12345) is None


def test_soft_deleted_community_is_absent(engine: SyncEngine, insert) -> None:
    live = insert("communities", name="Testers", metadata={})
    gone = insert("communities", name="Old", metadata={}, deleted_at="2025-01-01T00:00:00Z")
    assert fetch(engine, "communities", live) is not None
    assert fetch(engine, "communities", gone) is None


def test_community_projection_reads_metadata(engine: SyncEngine, insert) -> None:
    community_id = insert(
        "communities",
        slug="testers",
        name="Testers Guild",
        description="People who break things on purpose.",
        visibility="public",
        metadata={
            "tags": ["qa", " automation ", None],
            "languages": ["en", "fr"],
            "category": "engineering",
            "country": "GB",
            "tagline": "Break it before users do",
            "shortDescription": "A guild for testers",
            "memberCount": 310,
            "coverImageUrl": "https://cdn.example.com/cover.png",
        },
    )
    fields = fetch(engine, "communities", community_id)

    assert fields.title == "Testers Guild"
    assert fields.subtitle == "Break it before users do"
    assert fields.summary == "A guild for testers"
    assert fields.tags == ["qa", "automation"]
    assert fields.filters == {
        "visibility": "public",
        "category": "engineering",
        "languages": ["en", "fr"],
        "country": "GB",
        "tags": ["qa", "automation"],
    }
    assert fields.metadata == {"memberCount": "310", "country": "GB", "category": "engineering"}
    assert fields.media == {"coverImageUrl": "https://cdn.example.com/cover.png"}
    assert fields.keywords.scalars == ["engineering", "public", "GB"]


def test_community_counters_are_rendered_as_text(
    engine: SyncEngine, synchronizer: DocumentSynchronizer, insert
) -> None:
    """Nested values under the counters never leak nulls into the document."""
    community_id = insert(
        "communities",
        name="Counters",
        metadata={"memberCount": {"total": None}, "trendScore": [None, 1.5]},
    )
    synchronizer.refresh("communities", community_id)

    metadata = engine.store.get("communities", community_id).metadata

    assert metadata == {"memberCount": '{"total": null}', "trendScore": "[null, 1.5]"}
    assert_no_nulls(metadata)


def test_tutor_projection(engine: SyncEngine, insert) -> None:
    tutor_id = insert(
        "tutor_profiles",
        display_name="Grace Hopper",
        headline="Compiler whisperer",
        bio="Taught machines to read English.",
        skills=["COBOL", "compilers"],
        languages=["en"],
        country="US",
        is_verified=0,
        hourly_rate_amount=9000,
        hourly_rate_currency="USD",
    )
    fields = fetch(engine, "tutors", tutor_id)

    assert fields.slug is None
    assert fields.subtitle == "Compiler whisperer"
    assert fields.summary is None
    assert fields.index_text.summary == "Compiler whisperer"
    assert fields.tags == ["COBOL", "compilers"]
    assert fields.filters["isVerified"] is False
    assert fields.metadata["hourlyRate"] == {"amount": 9000, "currency": "USD"}
    assert "rating" not in fields.metadata
    assert fields.media == {}


def test_ticket_projection_joins_requester(engine: SyncEngine, insert) -> None:
    insert("users", id=3, email="learner@example.com")
    ticket_id = insert(
        "learner_support_cases",
        user_id=3,
        reference="SUP-1001",
        subject="Cannot access course videos",
        category="billing",
        priority="high",
        status="open",
        channel="email",
        metadata={"summary": "Video player spins", "description": "Started after renewal."},
    )
    fields = fetch(engine, "tickets", ticket_id)

    assert fields.slug == "SUP-1001"
    assert fields.subtitle == "billing"
    assert fields.summary == "Video player spins"
    assert fields.description == "Started after renewal."
    assert fields.tags == ["billing"]
    assert fields.index_text.summary == "billing"
    assert fields.metadata == {
        "reference": "SUP-1001",
        "channel": "email",
        "requester": "learner@example.com",
    }
    assert fields.keywords.scalars == ["high", "open", "email", "learner@example.com"]


def test_ticket_without_category_has_no_null_filter(engine: SyncEngine, insert) -> None:
    ticket_id = insert("learner_support_cases", subject="Help")
    fields = fetch(engine, "tickets", ticket_id)
    assert fields.filters == {}
    assert fields.metadata == {}
    assert fields.tags == [None]


def test_ebook_projection(engine: SyncEngine, insert) -> None:
    ebook_id = insert(
        "ebooks",
        slug="testing-handbook",
        title="The Testing Handbook",
        subtitle="Patterns that last",
        tags=["testing"],
        categories=["engineering"],
        languages=["en"],
        price_currency="EUR",
        price_amount=1500,
        sample_download_url="https://cdn.example.com/sample.pdf",
    )
    fields = fetch(engine, "ebooks", ebook_id)

    assert fields.summary == "Patterns that last"
    assert fields.filters == {"categories": ["engineering"], "languages": ["en"], "tags": ["testing"]}
    assert fields.metadata == {"price": {"currency": "EUR", "amount": 1500}}
    assert fields.media == {"sampleDownloadUrl": "https://cdn.example.com/sample.pdf"}
    assert fields.keywords.lists == [["en", "engineering", "testing"]]


def test_ad_projection(engine: SyncEngine, insert) -> None:
    ad_id = insert(
        "ads_campaigns",
        public_id="cmp_9",
        name="Spring Sale",
        objective="conversions",
        status="active",
        creative_description="Half price on testing courses",
        creative_url="https://ads.example.com/9",
        targeting_keywords=["testing", "qa"],
        targeting_audiences=["engineers"],
        targeting_locations=["GB"],
        budget_currency="USD",
        budget_daily_cents=5000,
    )
    fields = fetch(engine, "ads", ad_id)

    assert fields.slug == "cmp_9"
    assert fields.subtitle == "conversions"
    assert fields.index_text.summary == "conversions"
    assert fields.tags == ["testing", "qa"]
    assert fields.filters == {"objective": "conversions", "status": "active"}
    assert fields.metadata == {"budget": {"currency": "USD", "amount": 5000}}
    assert fields.media == {"creativeUrl": "https://ads.example.com/9"}
    assert fields.keywords.scalars == ["active"]
    assert fields.keywords.lists == [["GB", "engineers", "qa", "testing"]]


def test_event_projection_joins_community(engine: SyncEngine, insert) -> None:
    community_id = insert("communities", name="Testers Guild", metadata={"country": "GB"})
    event_id = insert(
        "community_events",
        community_id=community_id,
        slug="meetup",
        title="Monthly meetup",
        visibility="members",
        status="scheduled",
        timezone="Europe/London",
        attendance_limit=50,
    )
    fields = fetch(engine, "events", event_id)

    assert fields.subtitle == "Testers Guild"
    assert fields.tags == ["members"]
    assert fields.metadata == {
        "attendance": {"limit": 50},
        "communityName": "Testers Guild",
        "communityCountry": "GB",
    }
    assert fields.keywords.scalars == ["Testers Guild", "GB", "Europe/London", "scheduled"]


def test_event_without_community(engine: SyncEngine, insert) -> None:
    """Community country falls back to an empty string; the name is omitted."""
    event_id = insert("community_events", title="Orphan event")
    fields = fetch(engine, "events", event_id)
    assert fields.subtitle is None
    assert fields.metadata == {"communityCountry": ""}
    assert build_keyword_bag(fields.keywords.scalars, fields.keywords.lists) == {"keywords": []}


def test_malformed_json_raises_projection_error(engine: SyncEngine, insert) -> None:
    course_id = insert("courses", title="Broken", tags="[not json")
    with pytest.raises(ProjectionError) as excinfo:
        fetch(engine, "courses", course_id)
    assert excinfo.value.retryable is True
    assert excinfo.value.entity_id == course_id


def test_wrong_json_shape_raises_projection_error(engine: SyncEngine, insert) -> None:
    community_id = insert("communities", name="Odd", metadata=["not", "an", "object"])
    with pytest.raises(ProjectionError):
        fetch(engine, "communities", community_id)


def test_null_optional_fields_never_produce_null_attributes(engine: SyncEngine, insert) -> None:
    """Rows with only required columns still yield null-free maps."""
    ids = {
        "courses": insert("courses", title="c"),
        "communities": insert("communities", name="c"),
        "tutors": insert("tutor_profiles", display_name="t"),
        "tickets": insert("learner_support_cases", subject="t"),
        "ebooks": insert("ebooks", title="e"),
        "ads": insert("ads_campaigns", name="a"),
        "events": insert("community_events", title="e"),
    }
    for entity_type, entity_id in ids.items():
        fields = fetch(engine, entity_type, entity_id)
        for attributes in (fields.filters, fields.metadata, fields.media):
            assert_no_nulls(attributes)
