"""Document and admin endpoint tests."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from searchsync.app import create_app
from searchsync.config import Settings
from searchsync.engine import SyncEngine
from searchsync.sync import DocumentSynchronizer


@pytest.fixture
def strict_client(settings: Settings) -> Iterator[TestClient]:
    """Client whose engine rejects unknown entity types."""
    strict = settings.model_copy(update={"unknown_entity_policy": "raise"})
    engine = SyncEngine(strict)
    yield TestClient(create_app(strict, engine=engine))
    engine.close()


def test_get_document(
    client: TestClient, synchronizer: DocumentSynchronizer, course_42: int
) -> None:
    synchronizer.refresh("courses", course_42)

    response = client.get(f"/api/v1/documents/courses/{course_42}")

    assert response.status_code == 200
    data = response.json()
    assert data["entity_type"] == "courses"
    assert data["entity_id"] == 42
    assert data["title"] == "Intro to Testing"
    assert sorted(data["tags"]) == ["QA", "Testing", "testing"]
    assert data["metadata"]["price"] == {"currency": "USD", "amount": 4900}
    assert "intro" in data["search_vector"]["a"]


def test_get_missing_document_returns_404(client: TestClient) -> None:
    response = client.get("/api/v1/documents/courses/404")
    assert response.status_code == 404


def test_list_documents_paginates(
    client: TestClient, synchronizer: DocumentSynchronizer, insert
) -> None:
    for title in ("one", "two", "three"):
        insert("ebooks", title=title)
    insert("tutor_profiles", display_name="Grace")
    synchronizer.resync_all()

    response = client.get("/api/v1/documents", params={"entity_type": "ebooks", "limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["limit"] == 2
    assert [d["title"] for d in data["documents"]] == ["one", "two"]

    rest = client.get("/api/v1/documents", params={"limit": 10, "offset": 2}).json()
    assert rest["total"] == 4
    assert [(d["entity_type"], d["title"]) for d in rest["documents"]] == [
        ("ebooks", "three"),
        ("tutors", "Grace"),
    ]


def test_list_documents_validates_limit(client: TestClient) -> None:
    response = client.get("/api/v1/documents", params={"limit": 0})
    assert response.status_code == 422


def test_admin_refresh(client: TestClient, course_42: int) -> None:
    response = client.post(f"/api/v1/admin/refresh/courses/{course_42}")

    assert response.status_code == 200
    assert response.json() == {"entity_type": "courses", "entity_id": 42, "outcome": "upserted"}
    assert client.get("/api/v1/documents/courses/42").status_code == 200


def test_admin_refresh_unknown_type_deletes_by_default(client: TestClient) -> None:
    response = client.post("/api/v1/admin/refresh/unknown_type/7")
    assert response.status_code == 200
    assert response.json()["outcome"] == "deleted"


def test_admin_refresh_unknown_type_rejected_when_strict(strict_client: TestClient) -> None:
    response = strict_client.post("/api/v1/admin/refresh/unknown_type/7")
    assert response.status_code == 404


def test_admin_refresh_projection_error_is_retryable(client: TestClient, insert) -> None:
    course_id = insert("courses", title="Broken", tags="[nope")
    response = client.post(f"/api/v1/admin/refresh/courses/{course_id}")
    assert response.status_code == 503


def test_admin_resync(client: TestClient, insert, course_42: int) -> None:
    insert("ebooks", title="Handbook")

    response = client.post("/api/v1/admin/resync", json={"entity_types": ["courses"]})

    assert response.status_code == 200
    data = response.json()
    assert data["entity_types"] == ["courses"]
    assert data["refreshed"] == {"courses": 1}
    assert data["upserted"] == 1
    assert client.get("/api/v1/documents").json()["total"] == 1


def test_admin_resync_without_body_sweeps_everything(client: TestClient, insert) -> None:
    insert("ebooks", title="Handbook")
    response = client.post("/api/v1/admin/resync")
    assert response.status_code == 200
    assert len(response.json()["refreshed"]) == 7


def test_admin_resync_unknown_type_returns_404(client: TestClient) -> None:
    response = client.post("/api/v1/admin/resync", json={"entity_types": ["unknown_type"]})
    assert response.status_code == 404


def test_api_key_required_outside_health(settings: Settings, engine: SyncEngine) -> None:
    keyed = settings.model_copy(update={"key": "secret"})
    client = TestClient(create_app(keyed, engine=engine))

    assert client.get("/api/v1/health/live").status_code == 200
    assert client.get("/api/v1/documents").status_code == 401
    assert client.get("/api/v1/documents", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/v1/documents", headers={"X-API-Key": "secret"}).status_code == 200


def test_api_key_rejection_is_logged(
    settings: Settings, engine: SyncEngine, log_events: list[dict]
) -> None:
    keyed = settings.model_copy(update={"key": "secret"})
    client = TestClient(create_app(keyed, engine=engine))

    response = client.get("/api/v1/documents", headers={"X-API-Key": "wrong"})

    assert response.json() == {"detail": "Invalid API key"}
    rejected = [e for e in log_events if e["event"] == "api_key_rejected"]
    assert rejected == [
        {
            "event": "api_key_rejected",
            "log_level": "warning",
            "method": "GET",
            "path": "/api/v1/documents",
            "reason": "Invalid API key",
        }
    ]


def test_request_id_is_echoed_or_generated(client: TestClient, log_events: list[dict]) -> None:
    echoed = client.get("/api/v1/documents", headers={"X-Request-ID": "req-123"})
    assert echoed.headers["X-Request-ID"] == "req-123"

    generated = client.get("/api/v1/documents").headers["X-Request-ID"]
    assert len(generated) == 32
    assert generated != "req-123"

    requests = [e for e in log_events if e["event"] == "http_request"]
    assert [(e["path"], e["status"]) for e in requests] == [
        ("/api/v1/documents", 200),
        ("/api/v1/documents", 200),
    ]


def test_health_checks_are_not_logged(client: TestClient, log_events: list[dict]) -> None:
    response = client.get("/api/v1/health/live")
    assert "X-Request-ID" not in response.headers
    assert not [e for e in log_events if e["event"] == "http_request"]
