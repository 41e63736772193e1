"""Tests for the access-level policy."""

from __future__ import annotations

import uuid

import pytest
from _catalog_helpers import make_caller, make_resource

from librarian.catalog.access import AccessLevelPolicy
from librarian.catalog.domain import AccessLevel, Role

POLICY = AccessLevelPolicy()


def test_public_approved_resource_is_open_to_students() -> None:
    """Open approved public resources to everyone."""
    assert POLICY.can_access(make_caller(), make_resource())


def test_unapproved_resource_is_hidden_from_other_students() -> None:
    """Hide pending resources from students other than the uploader."""
    resource = make_resource(is_approved=False)

    assert not POLICY.can_access(make_caller(), resource)
    assert POLICY.can_access(make_caller(Role.LECTURER), resource)


def test_uploader_always_has_access() -> None:
    """Let uploaders open their own private, pending resources."""
    uploader = make_caller()
    resource = make_resource(
        uploaded_by=uploader.id,
        access_level=AccessLevel.PRIVATE,
        is_approved=False,
    )

    assert POLICY.can_access(uploader, resource)


def test_admin_can_open_private_resources() -> None:
    """Let admins open every resource."""
    resource = make_resource(access_level=AccessLevel.PRIVATE)

    assert POLICY.can_access(make_caller(Role.ADMIN), resource)
    assert not POLICY.can_access(make_caller(Role.LECTURER), resource)


@pytest.mark.parametrize(
    ("access_level", "field"),
    [(AccessLevel.DEPARTMENT, "department_ids"), (AccessLevel.COURSE, "course_ids")],
)
def test_scoped_resources_require_a_shared_scope(
    access_level: AccessLevel,
    field: str,
) -> None:
    """Require a shared department or course for scoped resources."""
    scope_id = uuid.uuid4()
    resource = make_resource(access_level=access_level, **{field: (scope_id,)})
    member = make_caller(**{field: frozenset({scope_id})})
    outsider = make_caller(**{field: frozenset({uuid.uuid4()})})

    assert POLICY.can_access(member, resource)
    assert not POLICY.can_access(outsider, resource)
