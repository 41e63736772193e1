"""Behavioural tests for importing external candidates.

Examples
--------
Run the resource import BDD scenarios:

>>> pytest tests/steps/test_resource_import_steps.py -v
"""

from __future__ import annotations

import typing as typ
import uuid

import pytest
from pytest_bdd import given, parsers, scenario, then, when

if typ.TYPE_CHECKING:
    from _catalog_helpers import InMemoryUnitOfWork
    from falcon import testing


class ImportContext(typ.TypedDict, total=False):
    """Shared state for import BDD steps."""

    first_id: str
    status: int
    body: dict[str, typ.Any]


def _headers(role: str) -> dict[str, str]:
    return {"X-User-Id": str(uuid.uuid4()), "X-User-Role": role}


def _volume_payload(external_id: str, *, with_links: bool = True) -> dict[str, typ.Any]:
    links = (
        {
            "preview_link": f"https://books.example.com/preview/{external_id}",
            "info_link": f"https://books.example.com/info/{external_id}",
        }
        if with_links
        else {"info_link": "books.example.com/no-scheme"}
    )
    return {
        "provider": "googleBooks",
        "candidate": {
            "id": external_id,
            "external_id": external_id,
            "title": "Computer Networks",
            "authors": ["Andrew Tanenbaum", "David Wetherall"],
            "published_date": "2010-09-27",
            "source_name": "Google Books",
            **links,
        },
    }


def _import(
    client: testing.TestClient,
    role: str,
    payload: dict[str, typ.Any],
) -> tuple[int, dict[str, typ.Any]]:
    response = client.simulate_post(
        "/resources/import", json=payload, headers=_headers(role)
    )
    return response.status_code, typ.cast("dict[str, typ.Any]", response.json)


@scenario(
    "../features/resource_import.feature",
    "Importing the same volume twice keeps one resource",
)
def test_repeated_import() -> None:
    """Run the repeated import scenario."""


@scenario(
    "../features/resource_import.feature",
    "Candidates without a usable link are rejected",
)
def test_import_without_link() -> None:
    """Run the rejected import scenario."""


@pytest.fixture
def import_context() -> ImportContext:
    """Share state between import BDD steps."""
    return typ.cast("ImportContext", {})


@given(
    parsers.parse(
        'a lecturer has imported volume "{external_id}" from the book catalog'
    )
)
def lecturer_imported_volume(
    memory_api_client: testing.TestClient,
    import_context: ImportContext,
    external_id: str,
) -> None:
    """Import a volume as a lecturer."""
    status, body = _import(
        memory_api_client, "lecturer", _volume_payload(external_id)
    )
    assert status == 201
    assert body["data"]["is_approved"] is True
    import_context["first_id"] = body["data"]["id"]


@when(parsers.parse('a student imports volume "{external_id}" from the book catalog'))
def student_imports_volume(
    memory_api_client: testing.TestClient,
    import_context: ImportContext,
    external_id: str,
) -> None:
    """Import the same volume as a student."""
    status, body = _import(memory_api_client, "student", _volume_payload(external_id))
    import_context["status"] = status
    import_context["body"] = body


@when("a lecturer imports a volume without links")
def lecturer_imports_linkless_volume(
    memory_api_client: testing.TestClient,
    import_context: ImportContext,
) -> None:
    """Import a volume whose links are unusable."""
    status, body = _import(
        memory_api_client, "lecturer", _volume_payload("vol-x", with_links=False)
    )
    import_context["status"] = status
    import_context["body"] = body


@then("the import returns the existing resource")
def import_returns_existing(import_context: ImportContext) -> None:
    """Check that the second import reused the first resource."""
    assert import_context["status"] == 200
    assert import_context["body"]["created"] is False
    assert import_context["body"]["data"]["id"] == import_context["first_id"]


@then("the import is rejected as an invalid candidate")
def import_rejected(import_context: ImportContext) -> None:
    """Check the rejection envelope."""
    assert import_context["status"] == 400
    assert import_context["body"]["code"] == "invalid_candidate"


@then(parsers.parse("the library holds {count:d} imported resource"))
def library_holds_imported(memory_uow: InMemoryUnitOfWork, count: int) -> None:
    """Check how many imported resources were stored."""
    imported = [
        resource for resource in memory_uow.store.values() if resource.source
    ]
    assert len(imported) == count
