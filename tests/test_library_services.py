"""Tests for uploads, resource detail, and curated lists."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import uuid

import pytest
from _catalog_helpers import InMemoryUnitOfWork, make_caller, make_resource

from librarian.catalog.access import AccessLevelPolicy
from librarian.catalog.domain import AccessLevel, Rating, ResourceType, Role
from librarian.catalog.errors import (
    AccessDeniedError,
    InvalidResourceError,
    ResourceNotFoundError,
)
from librarian.catalog.services import (
    StoredFile,
    UploadRequest,
    create_resource,
    detect_format,
    get_resource_detail,
    list_highlights,
)

PDF = StoredFile(
    filename="lecture-notes.PDF",
    file_url="https://files.example.edu/lecture-notes.pdf",
    mime_type="application/pdf",
    size=1024,
)


@pytest.mark.parametrize(
    ("stored", "expected"),
    [
        (None, "link"),
        (PDF, "pdf"),
        (dc.replace(PDF, mime_type="application/x-unknown"), "pdf"),
        (dc.replace(PDF, filename="slides.pptx", mime_type=None), "pptx"),
        (dc.replace(PDF, filename="README", mime_type=None), "other"),
    ],
)
def test_detect_format(stored: StoredFile | None, expected: str) -> None:
    """Prefer the MIME type, then the extension, for the content format."""
    assert detect_format(stored) == expected


@pytest.mark.asyncio
async def test_student_upload_waits_for_approval() -> None:
    """Store student uploads unapproved with normalised tags."""
    uow = InMemoryUnitOfWork()
    student = make_caller()

    resource = await create_resource(
        uow,
        student,
        UploadRequest(
            title="  Week 3 notes ",
            resource_type=ResourceType.DOCUMENT,
            file=PDF,
            tags=("graphs", " graphs", "", "trees"),
            level=200,
        ),
    )

    assert resource.title == "Week 3 notes"
    assert resource.format == "pdf"
    assert resource.tags == ("graphs", "trees")
    assert resource.is_approved is False
    assert resource.uploaded_by == student.id
    assert uow.store[resource.id] == resource
    assert uow.commits == 1


@pytest.mark.asyncio
async def test_lecturer_link_upload_is_approved() -> None:
    """Approve staff uploads immediately and treat link-only uploads as links."""
    resource = await create_resource(
        InMemoryUnitOfWork(),
        make_caller(Role.LECTURER),
        UploadRequest(
            title="Course website",
            resource_type=ResourceType.LINK,
            external_link="https://course.example.edu",
        ),
    )

    assert resource.is_approved is True
    assert resource.format == "link"
    assert resource.file_url is None


@pytest.mark.parametrize(
    ("request_", "message"),
    [
        (
            UploadRequest(title="Site", resource_type=ResourceType.LINK),
            "External link is required",
        ),
        (
            UploadRequest(title="Notes", resource_type=ResourceType.DOCUMENT),
            "File is required",
        ),
        (
            UploadRequest(
                title="Notes",
                resource_type=ResourceType.LINK,
                external_link="ftp://example.org/notes",
            ),
            "http or https",
        ),
        (
            UploadRequest(
                title="Notes", resource_type=ResourceType.DOCUMENT, file=PDF, level=250
            ),
            "level",
        ),
        (
            UploadRequest(title="   ", resource_type=ResourceType.DOCUMENT, file=PDF),
            "title",
        ),
    ],
)
@pytest.mark.asyncio
async def test_invalid_uploads_are_rejected(
    request_: UploadRequest,
    message: str,
) -> None:
    """Reject uploads that break resource invariants."""
    uow = InMemoryUnitOfWork()

    with pytest.raises(InvalidResourceError, match=message):
        await create_resource(uow, make_caller(), request_)

    assert uow.store == {}


@pytest.mark.asyncio
async def test_detail_counts_view_and_lists_related() -> None:
    """Count a view, expose the caller's rating and list related resources."""
    viewer = make_caller()
    course_id = uuid.uuid4()
    resource = make_resource(
        course_ids=(course_id,),
        views=9,
        ratings=(
            Rating(
                rater_id=viewer.id,
                score=4,
                review="",
                rated_at=dt.datetime.now(dt.UTC),
            ),
        ),
    )
    sibling = make_resource(
        resource_type=ResourceType.VIDEO,
        file_url="https://files.example.edu/v.mp4",
        course_ids=(course_id,),
        tags=(),
    )
    unrelated = make_resource(
        resource_type=ResourceType.IMAGE, tags=("art",), course_ids=()
    )
    pending = make_resource(is_approved=False)
    uow = InMemoryUnitOfWork(
        {item.id: item for item in (resource, sibling, unrelated, pending)}
    )

    detail = await get_resource_detail(uow, resource.id, viewer, AccessLevelPolicy())

    assert detail.resource.views == 10
    assert detail.own_rating == 4
    assert [item.id for item in detail.related] == [sibling.id]
    assert uow.commits == 1


@pytest.mark.asyncio
async def test_detail_of_missing_resource_fails() -> None:
    """Raise not-found for unknown identifiers."""
    with pytest.raises(ResourceNotFoundError):
        await get_resource_detail(
            InMemoryUnitOfWork(), uuid.uuid4(), make_caller(), AccessLevelPolicy()
        )


@pytest.mark.asyncio
async def test_denied_detail_does_not_count_a_view() -> None:
    """Leave the view counter untouched when access is denied."""
    resource = make_resource(access_level=AccessLevel.COURSE, course_ids=())
    uow = InMemoryUnitOfWork({resource.id: resource})

    with pytest.raises(AccessDeniedError):
        await get_resource_detail(uow, resource.id, make_caller(), AccessLevelPolicy())

    assert uow.store[resource.id].views == 0


@pytest.mark.asyncio
async def test_highlights_group_approved_resources() -> None:
    """Build featured, trending, recent and top-rated lists."""
    featured = make_resource(is_featured=True)
    popular = make_resource(views=50)
    rated = make_resource(
        average_rating=4.5,
        ratings=(
            Rating(
                rater_id=uuid.uuid4(),
                score=5,
                review="",
                rated_at=dt.datetime.now(dt.UTC),
            ),
        ),
    )
    uow = InMemoryUnitOfWork({item.id: item for item in (featured, popular, rated)})

    highlights = await list_highlights(uow, limit=1)

    assert [item.id for item in highlights.featured] == [featured.id]
    assert [item.id for item in highlights.trending] == [popular.id]
    assert [item.id for item in highlights.top_rated] == [rated.id]
    assert len(highlights.recent) == 1
