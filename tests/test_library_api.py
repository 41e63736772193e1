"""Tests for the resource library REST endpoints."""

from __future__ import annotations

import typing as typ
import uuid

import falcon
import pytest
from _catalog_helpers import (
    InMemoryUnitOfWork,
    RecordingNotifier,
    StaticProvider,
    make_resource,
)
from falcon import testing

from librarian.api import create_app
from librarian.api.app import status_for_error
from librarian.catalog.domain import AccessLevel, ResourceType
from librarian.catalog.errors import (
    AccessDeniedError,
    CatalogError,
    InvalidRatingError,
    LocalStoreError,
    ResourceNotFoundError,
    ShareRejectedError,
)
from librarian.settings import Settings

if typ.TYPE_CHECKING:
    from librarian.catalog.domain import Resource


def _headers(
    role: str = "student",
    user_id: uuid.UUID | None = None,
) -> dict[str, str]:
    return {"X-User-Id": str(user_id or uuid.uuid4()), "X-User-Role": role}


def _seed(uow: InMemoryUnitOfWork, *resources: Resource) -> None:
    for resource in resources:
        uow.store[resource.id] = resource


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (InvalidRatingError("bad"), falcon.HTTP_400),
        (ResourceNotFoundError("missing"), falcon.HTTP_404),
        (AccessDeniedError("no"), falcon.HTTP_403),
        (ShareRejectedError("not a member"), falcon.HTTP_403),
        (LocalStoreError("down"), falcon.HTTP_503),
        (CatalogError("other"), falcon.HTTP_500),
    ],
)
def test_status_for_error(error: CatalogError, status: str) -> None:
    """Map catalog errors to HTTP statuses."""
    assert status_for_error(error) == status


def test_requests_without_identity_are_unauthorised(
    memory_api_client: testing.TestClient,
) -> None:
    """Require the caller identity headers."""
    response = memory_api_client.simulate_get(
        "/resources/search", params={"query": "networks"}
    )

    assert response.status_code == 401


def test_search_returns_local_and_external_results(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Aggregate two local resources with three external candidates."""
    _seed(
        memory_uow,
        make_resource(title="Networks I"),
        make_resource(title="Networks II"),
        make_resource(title="Networks pending", is_approved=False),
    )

    response = memory_api_client.simulate_get(
        "/resources/search",
        params={"query": "networks", "sources": "local,googleBooks"},
        headers=_headers(),
    )

    assert response.status_code == 200, "Expected search to return 200."
    body = response.json
    assert body["success"] is True
    assert body["count"] == {"local": 2, "external": 3}
    assert body["pagination"] == {"page": 1, "limit": 20, "pages": 1}
    assert len(body["data"]["external"]["googleBooks"]) == 3
    assert body["failed_sources"] == []


def test_search_limit_is_clamped(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Clamp the page size to the configured maximum."""
    _seed(memory_uow, make_resource())

    response = memory_api_client.simulate_get(
        "/resources/search",
        params={"level": "200", "limit": "5000", "page": "0"},
        headers=_headers(),
    )

    assert response.status_code == 200
    assert response.json["pagination"] == {"page": 1, "limit": 100, "pages": 1}
    assert response.json["data"]["external"] == {}


def test_search_page_past_the_end_is_empty(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Return an empty local list for a page beyond the last one."""
    _seed(memory_uow, *(make_resource(level=300) for _ in range(3)))

    response = memory_api_client.simulate_get(
        "/resources/search",
        params={"level": "300", "limit": "2", "page": "9"},
        headers=_headers(),
    )

    assert response.status_code == 200
    body = response.json
    assert body["data"]["local"] == []
    assert body["count"]["local"] == 3
    assert body["pagination"] == {"page": 9, "limit": 2, "pages": 2}


def test_search_without_criteria_is_a_bad_request(
    memory_api_client: testing.TestClient,
) -> None:
    """Reject searches without a query or filters."""
    response = memory_api_client.simulate_get(
        "/resources/search", headers=_headers()
    )

    assert response.status_code == 400
    assert response.json["success"] is False
    assert response.json["code"] == "invalid_request"


def test_search_with_unknown_source_is_a_bad_request(
    memory_api_client: testing.TestClient,
) -> None:
    """Reject unknown source names."""
    response = memory_api_client.simulate_get(
        "/resources/search",
        params={"query": "graphs", "sources": "local,worldcat"},
        headers=_headers(),
    )

    assert response.status_code == 400
    assert "worldcat" in response.json["message"]


def test_local_store_failure_is_service_unavailable(
    google_books_stub: StaticProvider,
) -> None:
    """Report local store failures as 503."""

    class _BrokenUnitOfWork(InMemoryUnitOfWork):
        async def __aenter__(self) -> InMemoryUnitOfWork:
            msg = "connection refused"
            raise ConnectionError(msg)

    client = testing.TestClient(
        create_app(_BrokenUnitOfWork, {"googleBooks": google_books_stub})
    )

    response = client.simulate_get(
        "/resources/search", params={"query": "graphs"}, headers=_headers()
    )

    assert response.status_code == 503
    assert response.json["code"] == "local_store_failure"
    assert response.json["retryable"] is True


def test_import_creates_then_returns_existing(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Create on first import and return the same resource afterwards."""
    payload = {
        "provider": "googleBooks",
        "candidate": {
            "id": "vol-9",
            "title": "Computer Networks",
            "authors": ["Andrew Tanenbaum"],
            "published_date": "2011",
            "preview_link": "https://books.example.com/preview/vol-9",
            "info_link": "https://books.example.com/info/vol-9",
            "source_name": "Google Books",
            "external_id": "vol-9",
        },
    }

    created = memory_api_client.simulate_post(
        "/resources/import", json=payload, headers=_headers("lecturer")
    )
    repeated = memory_api_client.simulate_post(
        "/resources/import", json=payload, headers=_headers("student")
    )

    assert created.status_code == 201
    assert created.json["created"] is True
    assert created.json["data"]["resource_type"] == "link"
    assert created.json["data"]["is_approved"] is True
    assert repeated.status_code == 200
    assert repeated.json["created"] is False
    assert repeated.json["data"]["id"] == created.json["data"]["id"]
    assert len(memory_uow.store) == 1


def test_import_from_unknown_provider_is_rejected(
    memory_api_client: testing.TestClient,
) -> None:
    """Reject imports naming an unregistered provider."""
    response = memory_api_client.simulate_post(
        "/resources/import",
        json={"provider": "worldcat", "candidate": {"title": "x"}},
        headers=_headers(),
    )

    assert response.status_code == 400
    assert response.json["code"] == "invalid_candidate"


def test_upload_registers_resource(
    memory_api_client: testing.TestClient,
) -> None:
    """Register an uploaded file and return it with 201."""
    response = memory_api_client.simulate_post(
        "/resources",
        json={
            "title": "Week 1 notes",
            "resource_type": "document",
            "file": {
                "filename": "week1.pdf",
                "file_url": "https://files.example.edu/week1.pdf",
                "mime_type": "application/pdf",
            },
            "tags": "graphs, trees",
            "level": 100,
        },
        headers=_headers(),
    )

    assert response.status_code == 201
    data = response.json["data"]
    assert data["format"] == "pdf"
    assert data["tags"] == ["graphs", "trees"]
    assert data["is_approved"] is False


def test_upload_without_title_is_rejected(
    memory_api_client: testing.TestClient,
) -> None:
    """Require a title and a resource type."""
    response = memory_api_client.simulate_post(
        "/resources", json={"resource_type": "document"}, headers=_headers()
    )

    assert response.status_code == 400
    assert response.json["message"] == "Please provide title and resource type."


def test_detail_counts_views_and_reports_own_rating(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Count a view per read and return the caller's rating."""
    viewer_id = uuid.uuid4()
    resource = make_resource()
    _seed(memory_uow, resource)
    headers = _headers(user_id=viewer_id)

    rated = memory_api_client.simulate_post(
        f"/resources/{resource.id}/rate", json={"score": 4}, headers=headers
    )
    detail = memory_api_client.simulate_get(
        f"/resources/{resource.id}", headers=headers
    )

    assert rated.status_code == 200
    assert rated.json["data"] == {
        "rating": 4,
        "average_rating": 4.0,
        "ratings_count": 1,
    }
    assert detail.status_code == 200
    assert detail.json["data"]["resource"]["views"] == 1
    assert detail.json["data"]["user_rating"] == 4
    assert detail.json["data"]["related_resources"] == []


def test_detail_with_malformed_id_is_a_bad_request(
    memory_api_client: testing.TestClient,
) -> None:
    """Reject non-UUID identifiers."""
    response = memory_api_client.simulate_get(
        "/resources/not-a-uuid", headers=_headers()
    )

    assert response.status_code == 400


def test_detail_of_unknown_resource_is_not_found(
    memory_api_client: testing.TestClient,
) -> None:
    """Return 404 for unknown resources."""
    response = memory_api_client.simulate_get(
        f"/resources/{uuid.uuid4()}", headers=_headers()
    )

    assert response.status_code == 404
    assert response.json["code"] == "resource_not_found"


def test_rating_out_of_range_is_rejected(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Reject scores outside 1 to 5."""
    resource = make_resource()
    _seed(memory_uow, resource)

    response = memory_api_client.simulate_post(
        f"/resources/{resource.id}/rate", json={"score": 9}, headers=_headers()
    )

    assert response.status_code == 400
    assert response.json["code"] == "invalid_rating"


def test_download_of_link_returns_redirect_url(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Return the external link for link resources."""
    resource = make_resource(
        resource_type=ResourceType.LINK,
        file_url=None,
        external_link="https://example.org/paper",
    )
    _seed(memory_uow, resource)

    response = memory_api_client.simulate_post(
        f"/resources/{resource.id}/download", headers=_headers()
    )

    assert response.status_code == 200
    assert response.json["data"] == {
        "downloads": 1,
        "redirect_url": "https://example.org/paper",
    }


def test_private_download_is_forbidden(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Refuse downloads the access policy denies."""
    resource = make_resource(access_level=AccessLevel.PRIVATE)
    _seed(memory_uow, resource)

    response = memory_api_client.simulate_post(
        f"/resources/{resource.id}/download", headers=_headers()
    )

    assert response.status_code == 403


def test_share_with_group(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Share with a study group and count the share."""
    resource = make_resource()
    _seed(memory_uow, resource)
    group_id = str(uuid.uuid4())

    response = memory_api_client.simulate_post(
        f"/resources/{resource.id}/share",
        json={"group_id": group_id},
        headers=_headers(),
    )

    assert response.status_code == 200
    assert response.json["data"] == {
        "shares": 1,
        "group_id": group_id,
        "shared_with": 0,
    }


def test_featured_lists(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Return the curated lists filtered by type."""
    video = make_resource(
        resource_type=ResourceType.VIDEO,
        file_url="https://files.example.edu/v.mp4",
        is_featured=True,
    )
    _seed(memory_uow, video, make_resource(is_featured=True))

    response = memory_api_client.simulate_get(
        "/resources/featured", params={"type": "video"}, headers=_headers()
    )

    assert response.status_code == 200
    data = response.json["data"]
    assert [item["id"] for item in data["featured"]] == [str(video.id)]
    assert set(data) == {"featured", "trending", "recent", "top_rated"}


def test_custom_settings_change_default_page_size(
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Use the configured default page size."""
    client = testing.TestClient(
        create_app(lambda: memory_uow, {}, settings=Settings(default_limit=7))
    )

    response = client.simulate_get(
        "/resources/search", params={"query": "graphs"}, headers=_headers()
    )

    assert response.status_code == 200
    assert response.json["pagination"]["limit"] == 7


def test_rejected_share_is_forbidden_and_not_counted(
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Leave the share counter alone when the notifier refuses."""
    resource = make_resource()
    _seed(memory_uow, resource)
    client = testing.TestClient(
        create_app(lambda: memory_uow, {}, notifier=RecordingNotifier(reject=True))
    )

    response = client.simulate_post(
        f"/resources/{resource.id}/share",
        json={"user_ids": [str(uuid.uuid4())]},
        headers=_headers(),
    )

    assert response.status_code == 403
    assert response.json["code"] == "share_rejected"
    assert memory_uow.store[resource.id].shares == 0


def test_share_without_target_is_a_bad_request(
    memory_api_client: testing.TestClient,
    memory_uow: InMemoryUnitOfWork,
) -> None:
    """Require a group or at least one user."""
    resource = make_resource()
    _seed(memory_uow, resource)

    response = memory_api_client.simulate_post(
        f"/resources/{resource.id}/share", json={}, headers=_headers()
    )

    assert response.status_code == 400
    assert response.json["code"] == "invalid_request"
