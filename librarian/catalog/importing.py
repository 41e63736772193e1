"""Import external candidates into the local resource library.

Importing promotes an ephemeral ``CandidateRecord`` into a persisted
``Resource`` owned by the importer. Re-importing a candidate whose provenance
``(source_name, external_id)`` already exists returns the existing resource
instead of creating a copy; a partial unique index on the provenance pair
settles concurrent imports of the same candidate.

Examples
--------
>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     result = await import_candidate(uow, request)
>>> result.created
True
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import typing as typ
import uuid

from librarian.logging import get_logger, log_info

from .candidates import ProviderCategory
from .domain import AccessLevel, Resource, ResourceSource, ResourceType
from .errors import InvalidCandidateError

if typ.TYPE_CHECKING:
    from .candidates import CandidateRecord
    from .domain import Caller
    from .ports import CatalogUnitOfWork

logger = get_logger(__name__)

_YEAR_PATTERN = re.compile(r"\d{4}")
_CATEGORY_TYPES: dict[ProviderCategory, ResourceType] = {
    ProviderCategory.BOOK_CATALOG: ResourceType.LINK,
    ProviderCategory.OPEN_ACCESS: ResourceType.DOCUMENT,
    ProviderCategory.PREPRINT: ResourceType.DOCUMENT,
}
IMPORTED_FORMAT = "link"


@dc.dataclass(frozen=True, slots=True)
class ImportRequest:
    """Request to import one external candidate.

    Attributes
    ----------
    candidate : CandidateRecord
        Candidate chosen by the importer.
    category : ProviderCategory
        Category of the provider that produced the candidate.
    importer : Caller
        Identity performing the import.
    access_level : AccessLevel
        Visibility of the imported resource.
    department_ids, course_ids : tuple[uuid.UUID, ...]
        Catalog associations for the imported resource.
    """

    candidate: CandidateRecord
    category: ProviderCategory
    importer: Caller
    access_level: AccessLevel = AccessLevel.PUBLIC
    department_ids: tuple[uuid.UUID, ...] = ()
    course_ids: tuple[uuid.UUID, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class ImportResult:
    """Imported resource and whether this import created it."""

    resource: Resource
    created: bool


def _is_http_url(value: str | None) -> bool:
    return bool(value) and value.strip().lower().startswith(("http://", "https://"))


def _usable_link(candidate: CandidateRecord) -> str | None:
    """Return the first http(s) link among preview and info links."""
    for link in (candidate.preview_link, candidate.info_link):
        if _is_http_url(link):
            return typ.cast("str", link).strip()
    return None


def publication_year(published_date: str | None) -> int | None:
    """Return the year from the first four digits of ``published_date``."""
    if not published_date:
        return None
    match = _YEAR_PATTERN.search(published_date)
    return int(match.group()) if match else None


def _validate(candidate: CandidateRecord) -> str:
    """Validate ``candidate`` and return its usable link."""
    if not candidate.title.strip():
        msg = "Imported resources require a title."
        raise InvalidCandidateError(msg, entity_id=candidate.external_id or None)
    if not candidate.source_name.strip():
        msg = "Imported resources require a source name."
        raise InvalidCandidateError(msg, entity_id=candidate.external_id or None)
    link = _usable_link(candidate)
    if link is None:
        msg = "Imported resources require an http or https link."
        raise InvalidCandidateError(msg, entity_id=candidate.external_id or None)
    return link


def build_imported_resource(
    request: ImportRequest,
    *,
    now: dt.datetime | None = None,
) -> Resource:
    """Build the resource an import would persist.

    Parameters
    ----------
    request : ImportRequest
        Import request carrying the candidate and ownership details.
    now : datetime.datetime | None, optional
        Creation timestamp; defaults to the current UTC time.

    Returns
    -------
    Resource
        Unsaved resource with ``file_url`` unset and ``external_link`` set to
        the candidate's preview or info link.

    Raises
    ------
    InvalidCandidateError
        If the candidate lacks a title, a source name, or an http(s) link.
    """
    candidate = request.candidate
    link = _validate(candidate)
    timestamp = now or dt.datetime.now(dt.UTC)
    external_id = candidate.external_id.strip() or None
    return Resource(
        id=uuid.uuid4(),
        title=candidate.title.strip(),
        description=candidate.description,
        resource_type=_CATEGORY_TYPES[request.category],
        format=IMPORTED_FORMAT,
        author=", ".join(candidate.authors) or None,
        publisher=None,
        publication_year=publication_year(candidate.published_date),
        isbn=None,
        language="English",
        tags=(),
        department_ids=tuple(dict.fromkeys(request.department_ids)),
        course_ids=tuple(dict.fromkeys(request.course_ids)),
        level=None,
        file_url=None,
        external_link=link,
        thumbnail=candidate.thumbnail,
        uploaded_by=request.importer.id,
        access_level=request.access_level,
        is_approved=request.importer.role.is_staff,
        is_featured=False,
        views=0,
        downloads=0,
        shares=0,
        ratings=(),
        average_rating=0.0,
        source=ResourceSource(
            name=candidate.source_name.strip(),
            external_id=external_id,
            url=candidate.info_link if _is_http_url(candidate.info_link) else link,
        ),
        created_at=timestamp,
        updated_at=timestamp,
    )


async def import_candidate(
    uow: CatalogUnitOfWork,
    request: ImportRequest,
) -> ImportResult:
    """Import ``request.candidate`` unless it was imported before.

    Parameters
    ----------
    uow : CatalogUnitOfWork
        Active unit of work.
    request : ImportRequest
        Import request.

    Returns
    -------
    ImportResult
        The persisted resource; ``created`` is ``False`` when an earlier
        import of the same provenance pair was returned instead.

    Raises
    ------
    InvalidCandidateError
        If the candidate cannot become a resource.
    """
    resource = build_imported_resource(request)
    source = typ.cast("ResourceSource", resource.source)
    if source.external_id is not None:
        existing = await uow.resources.get_by_source(source.name, source.external_id)
        if existing is not None:
            log_info(
                logger,
                "Import of %s/%s matched existing resource %s.",
                source.name,
                source.external_id,
                existing.id,
            )
            return ImportResult(resource=existing, created=False)

    inserted = await uow.resources.add_imported(resource)
    if not inserted:
        existing = await uow.resources.get_by_source(
            source.name, typ.cast("str", source.external_id)
        )
        if existing is None:
            msg = "Imported resource vanished after a provenance conflict."
            raise RuntimeError(msg)
        return ImportResult(resource=existing, created=False)

    await uow.commit()
    log_info(
        logger,
        "Imported %s/%s as resource %s.",
        source.name,
        source.external_id,
        resource.id,
    )
    return ImportResult(resource=resource, created=True)


__all__ = (
    "IMPORTED_FORMAT",
    "ImportRequest",
    "ImportResult",
    "build_imported_resource",
    "import_candidate",
    "publication_year",
)
