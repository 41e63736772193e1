"""Record-to-domain mapping helpers for resource persistence.

Examples
--------
Convert a record to a domain entity:

>>> resource = _resource_from_record(record)
"""

from __future__ import annotations

import typing as typ

from librarian.catalog.domain import Rating, Resource, ResourceSource

from .models import ResourceRecord

if typ.TYPE_CHECKING:
    import uuid

    from .models import ResourceRatingRecord


def _rating_from_record(record: ResourceRatingRecord) -> Rating:
    """Map a rating record to a domain rating."""
    return Rating(
        rater_id=record.rater_id,
        score=record.score,
        review=record.review,
        rated_at=record.rated_at,
    )


def _rating_to_values(resource_id: uuid.UUID, rating: Rating) -> dict[str, typ.Any]:
    """Map a domain rating to insert values for ``resource_ratings``."""
    return {
        "resource_id": resource_id,
        "rater_id": rating.rater_id,
        "score": rating.score,
        "review": rating.review,
        "rated_at": rating.rated_at,
    }


def _source_from_record(record: ResourceRecord) -> ResourceSource | None:
    if record.source_name is None:
        return None
    return ResourceSource(
        name=record.source_name,
        external_id=record.source_external_id,
        url=record.source_url,
    )


def _resource_from_record(record: ResourceRecord) -> Resource:
    """Map a resource record and its loaded ratings to a domain entity."""
    return Resource(
        id=record.id,
        title=record.title,
        description=record.description,
        resource_type=record.resource_type,
        format=record.format,
        author=record.author,
        publisher=record.publisher,
        publication_year=record.publication_year,
        isbn=record.isbn,
        language=record.language,
        tags=tuple(record.tags or ()),
        department_ids=tuple(record.department_ids or ()),
        course_ids=tuple(record.course_ids or ()),
        level=record.level,
        file_url=record.file_url,
        external_link=record.external_link,
        thumbnail=record.thumbnail,
        uploaded_by=record.uploaded_by,
        access_level=record.access_level,
        is_approved=record.is_approved,
        is_featured=record.is_featured,
        views=record.views,
        downloads=record.downloads,
        shares=record.shares,
        ratings=tuple(_rating_from_record(rating) for rating in record.ratings),
        average_rating=record.average_rating,
        source=_source_from_record(record),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _resource_to_values(resource: Resource) -> dict[str, typ.Any]:
    """Map a domain resource to column values; ratings are stored separately."""
    source = resource.source
    return {
        "id": resource.id,
        "title": resource.title,
        "description": resource.description,
        "resource_type": resource.resource_type,
        "format": resource.format,
        "author": resource.author,
        "publisher": resource.publisher,
        "publication_year": resource.publication_year,
        "isbn": resource.isbn,
        "language": resource.language,
        "tags": list(resource.tags),
        "department_ids": list(resource.department_ids),
        "course_ids": list(resource.course_ids),
        "level": resource.level,
        "file_url": resource.file_url,
        "external_link": resource.external_link,
        "thumbnail": resource.thumbnail,
        "uploaded_by": resource.uploaded_by,
        "access_level": resource.access_level,
        "is_approved": resource.is_approved,
        "is_featured": resource.is_featured,
        "views": resource.views,
        "downloads": resource.downloads,
        "shares": resource.shares,
        "average_rating": resource.average_rating,
        "source_name": source.name if source is not None else None,
        "source_external_id": source.external_id if source is not None else None,
        "source_url": source.url if source is not None else None,
        "created_at": resource.created_at,
        "updated_at": resource.updated_at,
    }


def _resource_to_record(resource: Resource) -> ResourceRecord:
    """Map a domain resource to a new ORM record without ratings."""
    return ResourceRecord(**_resource_to_values(resource))
