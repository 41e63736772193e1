"""Response serializers for the resource library endpoints."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from librarian.catalog.candidates import CandidateRecord
    from librarian.catalog.domain import Rating, Resource
    from librarian.catalog.engagement import DownloadTarget, RatingSummary, ShareResult
    from librarian.catalog.search import SearchResponse
    from librarian.catalog.services import Highlights, ResourceDetail


def serialize_rating(rating: Rating) -> dict[str, typ.Any]:
    """Serialize one rating."""
    return {
        "rater_id": str(rating.rater_id),
        "score": rating.score,
        "review": rating.review,
        "rated_at": rating.rated_at.isoformat(),
    }


def serialize_resource(resource: Resource) -> dict[str, typ.Any]:
    """Serialize a library resource."""
    source = resource.source
    return {
        "id": str(resource.id),
        "title": resource.title,
        "description": resource.description,
        "resource_type": resource.resource_type.value,
        "format": resource.format,
        "author": resource.author,
        "publisher": resource.publisher,
        "publication_year": resource.publication_year,
        "isbn": resource.isbn,
        "language": resource.language,
        "tags": list(resource.tags),
        "department_ids": [str(item) for item in resource.department_ids],
        "course_ids": [str(item) for item in resource.course_ids],
        "level": resource.level,
        "file_url": resource.file_url,
        "external_link": resource.external_link,
        "thumbnail": resource.thumbnail,
        "uploaded_by": str(resource.uploaded_by),
        "access_level": resource.access_level.value,
        "is_approved": resource.is_approved,
        "is_featured": resource.is_featured,
        "views": resource.views,
        "downloads": resource.downloads,
        "shares": resource.shares,
        "ratings": [serialize_rating(rating) for rating in resource.ratings],
        "average_rating": round(resource.average_rating, 2),
        "source": (
            None
            if source is None
            else {
                "name": source.name,
                "external_id": source.external_id,
                "url": source.url,
            }
        ),
        "created_at": resource.created_at.isoformat(),
        "updated_at": resource.updated_at.isoformat(),
    }


def serialize_candidate(candidate: CandidateRecord) -> dict[str, typ.Any]:
    """Serialize an external candidate."""
    return {
        "id": candidate.id,
        "title": candidate.title,
        "description": candidate.description,
        "authors": list(candidate.authors),
        "published_date": candidate.published_date,
        "thumbnail": candidate.thumbnail,
        "preview_link": candidate.preview_link,
        "info_link": candidate.info_link,
        "source_name": candidate.source_name,
        "external_id": candidate.external_id,
    }


def serialize_search_response(response: SearchResponse) -> dict[str, typ.Any]:
    """Serialize the aggregated search envelope."""
    return {
        "success": True,
        "count": {
            "local": response.local_total,
            "external": response.external_count,
        },
        "pagination": {
            "page": response.pagination.page,
            "limit": response.pagination.limit,
            "pages": response.pagination.pages,
        },
        "data": {
            "local": [serialize_resource(item) for item in response.local],
            "external": {
                name: [serialize_candidate(candidate) for candidate in candidates]
                for name, candidates in response.external.items()
            },
        },
        "failed_sources": list(response.failed_sources),
    }


def serialize_detail(detail: ResourceDetail) -> dict[str, typ.Any]:
    """Serialize a resource detail view."""
    return {
        "resource": serialize_resource(detail.resource),
        "user_rating": detail.own_rating,
        "related_resources": [serialize_resource(item) for item in detail.related],
    }


def serialize_highlights(highlights: Highlights) -> dict[str, typ.Any]:
    """Serialize the curated resource lists."""
    return {
        "featured": [serialize_resource(item) for item in highlights.featured],
        "trending": [serialize_resource(item) for item in highlights.trending],
        "recent": [serialize_resource(item) for item in highlights.recent],
        "top_rated": [serialize_resource(item) for item in highlights.top_rated],
    }


def serialize_rating_summary(summary: RatingSummary) -> dict[str, typ.Any]:
    """Serialize a rating upsert outcome."""
    return {
        "rating": summary.score,
        "average_rating": round(summary.average_rating, 2),
        "ratings_count": summary.ratings_count,
    }


def serialize_download(target: DownloadTarget) -> dict[str, typ.Any]:
    """Serialize a download target, omitting the unset location."""
    payload: dict[str, typ.Any] = {"downloads": target.downloads}
    if target.redirect_url is not None:
        payload["redirect_url"] = target.redirect_url
    else:
        payload["file_url"] = target.file_url
    return payload


def serialize_share(result: ShareResult) -> dict[str, typ.Any]:
    """Serialize a share outcome."""
    return {
        "shares": result.shares,
        "group_id": str(result.group_id) if result.group_id is not None else None,
        "shared_with": result.recipients,
    }
