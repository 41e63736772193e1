"""Resource library services: uploads, resource detail, and curated lists.

Examples
--------
Register an uploaded file:

>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     resource = await create_resource(uow, caller, request)
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import pathlib
import typing as typ
import uuid

from librarian.logging import get_logger, log_info

from .domain import (
    RESOURCE_LEVELS,
    AccessLevel,
    EngagementCounter,
    Resource,
    ResourceOrdering,
    ResourceType,
    normalise_tags,
)
from .engagement import ensure_access
from .errors import InvalidResourceError, ResourceNotFoundError

if typ.TYPE_CHECKING:
    from .domain import Caller
    from .ports import AccessPolicy, CatalogUnitOfWork

logger = get_logger(__name__)

RELATED_LIMIT = 5
DEFAULT_HIGHLIGHT_LIMIT = 10

_MIME_FORMATS: dict[str, str] = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        "docx"
    ),
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": (
        "pptx"
    ),
    "text/plain": "txt",
    "video/mp4": "mp4",
    "audio/mpeg": "mp3",
    "image/jpeg": "jpg",
    "image/png": "png",
}


@dc.dataclass(frozen=True, slots=True)
class StoredFile:
    """File already written to external storage by the upload collaborator."""

    filename: str
    file_url: str
    mime_type: str | None = None
    size: int | None = None


@dc.dataclass(frozen=True, slots=True)
class UploadRequest:
    """Resource registration payload.

    Attributes
    ----------
    title : str
        Resource title.
    resource_type : ResourceType
        Resource kind.
    description : str
        Free-text description.
    file : StoredFile | None
        Stored file, required unless an external link is given.
    external_link : str | None
        External URL, required for link resources.
    author, publisher, isbn : str | None
        Bibliographic details.
    publication_year : int | None
        Year of publication.
    tags : tuple[str, ...]
        Raw tags; blanks and repeats are dropped.
    department_ids, course_ids : tuple[uuid.UUID, ...]
        Catalog associations.
    level : int | None
        Academic level.
    access_level : AccessLevel
        Visibility level.
    language : str
        Content language.
    thumbnail : str | None
        Thumbnail image URL.
    """

    title: str
    resource_type: ResourceType
    description: str = ""
    file: StoredFile | None = None
    external_link: str | None = None
    author: str | None = None
    publisher: str | None = None
    isbn: str | None = None
    publication_year: int | None = None
    tags: tuple[str, ...] = ()
    department_ids: tuple[uuid.UUID, ...] = ()
    course_ids: tuple[uuid.UUID, ...] = ()
    level: int | None = None
    access_level: AccessLevel = AccessLevel.PUBLIC
    language: str = "English"
    thumbnail: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ResourceDetail:
    """Resource detail view for one caller."""

    resource: Resource
    own_rating: int | None
    related: tuple[Resource, ...]


@dc.dataclass(frozen=True, slots=True)
class Highlights:
    """Curated resource lists for the library landing page."""

    featured: tuple[Resource, ...]
    trending: tuple[Resource, ...]
    recent: tuple[Resource, ...]
    top_rated: tuple[Resource, ...]


def detect_format(stored: StoredFile | None) -> str:
    """Return the content format for ``stored``.

    The MIME type wins over the file extension; resources without a stored
    file are links.
    """
    if stored is None:
        return "link"
    if stored.mime_type and stored.mime_type in _MIME_FORMATS:
        return _MIME_FORMATS[stored.mime_type]
    extension = pathlib.PurePath(stored.filename).suffix.lower().lstrip(".")
    return extension or "other"


def _validate_upload(request: UploadRequest) -> None:
    if not request.title.strip():
        msg = "Resources require a title."
        raise InvalidResourceError(msg)
    link = (request.external_link or "").strip()
    if request.resource_type is ResourceType.LINK and not link:
        msg = "External link is required for link type resources."
        raise InvalidResourceError(msg)
    if request.file is None and not link:
        msg = "File is required for non-link resources."
        raise InvalidResourceError(msg)
    if link and not link.lower().startswith(("http://", "https://")):
        msg = "External links must use http or https."
        raise InvalidResourceError(msg)
    if request.level is not None and request.level not in RESOURCE_LEVELS:
        msg = f"Unsupported resource level: {request.level}."
        raise InvalidResourceError(msg)


async def create_resource(
    uow: CatalogUnitOfWork,
    uploader: Caller,
    request: UploadRequest,
) -> Resource:
    """Register an uploaded resource.

    Parameters
    ----------
    uow : CatalogUnitOfWork
        Active unit of work.
    uploader : Caller
        Uploading identity; staff uploads are approved immediately.
    request : UploadRequest
        Validated upload payload.

    Returns
    -------
    Resource
        Persisted resource.

    Raises
    ------
    InvalidResourceError
        If the payload violates resource invariants.
    """
    _validate_upload(request)
    now = dt.datetime.now(dt.UTC)
    resource = Resource(
        id=uuid.uuid4(),
        title=request.title.strip(),
        description=request.description,
        resource_type=request.resource_type,
        format=detect_format(request.file),
        author=request.author,
        publisher=request.publisher,
        publication_year=request.publication_year,
        isbn=request.isbn,
        language=request.language,
        tags=normalise_tags(request.tags),
        department_ids=tuple(dict.fromkeys(request.department_ids)),
        course_ids=tuple(dict.fromkeys(request.course_ids)),
        level=request.level,
        file_url=request.file.file_url if request.file is not None else None,
        external_link=(request.external_link or "").strip() or None,
        thumbnail=request.thumbnail,
        uploaded_by=uploader.id,
        access_level=request.access_level,
        is_approved=uploader.role.is_staff,
        is_featured=False,
        views=0,
        downloads=0,
        shares=0,
        ratings=(),
        average_rating=0.0,
        source=None,
        created_at=now,
        updated_at=now,
    )
    await uow.resources.add(resource)
    await uow.commit()
    log_info(
        logger,
        "Registered %s resource %s (approved=%s).",
        resource.resource_type,
        resource.id,
        resource.is_approved,
    )
    return resource


async def get_resource_detail(
    uow: CatalogUnitOfWork,
    resource_id: uuid.UUID,
    caller: Caller,
    policy: AccessPolicy,
) -> ResourceDetail:
    """Return a resource for ``caller`` and count the view.

    Raises
    ------
    ResourceNotFoundError
        If the resource does not exist.
    AccessDeniedError
        If ``policy`` refuses the caller.
    """
    resource = await uow.resources.get(resource_id)
    if resource is None:
        msg = f"Resource {resource_id} not found."
        raise ResourceNotFoundError(msg, entity_id=str(resource_id))
    ensure_access(policy, caller, resource)

    views = await uow.resources.increment(resource_id, EngagementCounter.VIEWS)
    if views is None:
        msg = f"Resource {resource_id} not found."
        raise ResourceNotFoundError(msg, entity_id=str(resource_id))
    related = await uow.resources.list_related(resource, limit=RELATED_LIMIT)
    await uow.commit()

    own = resource.rating_by(caller.id)
    return ResourceDetail(
        resource=dc.replace(resource, views=views),
        own_rating=own.score if own is not None else None,
        related=tuple(related),
    )


async def list_highlights(
    uow: CatalogUnitOfWork,
    *,
    limit: int = DEFAULT_HIGHLIGHT_LIMIT,
    resource_type: ResourceType | None = None,
) -> Highlights:
    """Return featured, trending, recent and top-rated approved resources."""
    lists: dict[ResourceOrdering, tuple[Resource, ...]] = {}
    for ordering in ResourceOrdering:
        resources = await uow.resources.list_ordered(
            ordering, limit=limit, resource_type=resource_type
        )
        lists[ordering] = tuple(resources)
    return Highlights(
        featured=lists[ResourceOrdering.FEATURED],
        trending=lists[ResourceOrdering.TRENDING],
        recent=lists[ResourceOrdering.RECENT],
        top_rated=lists[ResourceOrdering.TOP_RATED],
    )


__all__ = (
    "DEFAULT_HIGHLIGHT_LIMIT",
    "RELATED_LIMIT",
    "Highlights",
    "ResourceDetail",
    "StoredFile",
    "UploadRequest",
    "create_resource",
    "detect_format",
    "get_resource_detail",
    "list_highlights",
)
