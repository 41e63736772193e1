"""Domain models for the resource library."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt
    import uuid


class ResourceType(enum.StrEnum):
    """Kinds of library resources."""

    DOCUMENT = "document"
    LINK = "link"
    VIDEO = "video"
    IMAGE = "image"
    OTHER = "other"


class AccessLevel(enum.StrEnum):
    """Visibility levels for library resources."""

    PUBLIC = "public"
    DEPARTMENT = "department"
    COURSE = "course"
    PRIVATE = "private"


class Role(enum.StrEnum):
    """Portal roles known to the resource library."""

    STUDENT = "student"
    LECTURER = "lecturer"
    ADMIN = "admin"

    @property
    def is_staff(self) -> bool:
        """Return whether uploads by this role are approved automatically."""
        return self in {Role.LECTURER, Role.ADMIN}


#: Academic levels accepted for resources; ``0`` marks general resources.
RESOURCE_LEVELS: frozenset[int] = frozenset({0, 100, 200, 300, 400, 500, 600})

MIN_RATING_SCORE = 1
MAX_RATING_SCORE = 5


@dc.dataclass(frozen=True, slots=True)
class Caller:
    """Authenticated identity making a request.

    Attributes
    ----------
    id : uuid.UUID
        Portal user identifier.
    role : Role
        Portal role of the caller.
    department_ids : frozenset[uuid.UUID]
        Departments the caller belongs to.
    course_ids : frozenset[uuid.UUID]
        Courses the caller is enrolled in or teaches.
    """

    id: uuid.UUID
    role: Role
    department_ids: frozenset[uuid.UUID] = frozenset()
    course_ids: frozenset[uuid.UUID] = frozenset()


@dc.dataclass(frozen=True, slots=True)
class Rating:
    """One rater's score for a resource."""

    rater_id: uuid.UUID
    score: int
    review: str
    rated_at: dt.datetime


@dc.dataclass(frozen=True, slots=True)
class ResourceSource:
    """Provenance of a resource imported from an external provider."""

    name: str
    external_id: str | None
    url: str | None


@dc.dataclass(frozen=True, slots=True)
class Resource:
    """Persisted library resource.

    Attributes
    ----------
    id : uuid.UUID
        Primary key.
    title : str
        Display title.
    description : str
        Free-text description.
    resource_type : ResourceType
        Resource kind.
    format : str
        File or content format such as ``"pdf"`` or ``"link"``.
    author, publisher : str | None
        Bibliographic attribution.
    publication_year : int | None
        Year of publication.
    isbn : str | None
        ISBN when known.
    language : str
        Content language.
    tags : tuple[str, ...]
        De-duplicated tags in insertion order.
    department_ids, course_ids : tuple[uuid.UUID, ...]
        Catalog associations.
    level : int | None
        Academic level, one of ``RESOURCE_LEVELS``.
    file_url, external_link : str | None
        Location of the content; at least one is set.
    thumbnail : str | None
        Thumbnail image URL.
    uploaded_by : uuid.UUID
        Uploader or importer identity.
    access_level : AccessLevel
        Visibility level.
    is_approved, is_featured : bool
        Moderation flags.
    views, downloads, shares : int
        Engagement counters.
    ratings : tuple[Rating, ...]
        At most one rating per rater.
    average_rating : float
        Mean of ``ratings`` scores, ``0.0`` when unrated.
    source : ResourceSource | None
        Import provenance, ``None`` for uploads.
    created_at, updated_at : dt.datetime
        Timestamps.
    """

    id: uuid.UUID
    title: str
    description: str
    resource_type: ResourceType
    format: str
    author: str | None
    publisher: str | None
    publication_year: int | None
    isbn: str | None
    language: str
    tags: tuple[str, ...]
    department_ids: tuple[uuid.UUID, ...]
    course_ids: tuple[uuid.UUID, ...]
    level: int | None
    file_url: str | None
    external_link: str | None
    thumbnail: str | None
    uploaded_by: uuid.UUID
    access_level: AccessLevel
    is_approved: bool
    is_featured: bool
    views: int
    downloads: int
    shares: int
    ratings: tuple[Rating, ...]
    average_rating: float
    source: ResourceSource | None
    created_at: dt.datetime
    updated_at: dt.datetime

    def __post_init__(self) -> None:
        """Validate content-location invariants."""
        if self.resource_type is ResourceType.LINK and not self.external_link:
            msg = "Link resources require an external link."
            raise ValueError(msg)
        if not self.file_url and not self.external_link:
            msg = "Resources require a file reference or an external link."
            raise ValueError(msg)

    def rating_by(self, rater_id: uuid.UUID) -> Rating | None:
        """Return the rating held by ``rater_id``, if any."""
        return next((r for r in self.ratings if r.rater_id == rater_id), None)


def average_score(ratings: cabc.Iterable[Rating]) -> float:
    """Return the arithmetic mean of rating scores, ``0.0`` when empty."""
    scores = [rating.score for rating in ratings]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def normalise_tags(tags: cabc.Iterable[str]) -> tuple[str, ...]:
    """Strip, drop blanks and de-duplicate tags, preserving first occurrence."""
    seen: dict[str, None] = {}
    for tag in tags:
        stripped = tag.strip()
        if stripped:
            seen.setdefault(stripped, None)
    return tuple(seen)


@dc.dataclass(frozen=True, slots=True)
class ResourceFilter:
    """Structured filter for local resource queries.

    ``approved_only`` is always ``True`` for public search; ``query`` enables
    full-text matching and relevance ordering.
    """

    approved_only: bool = True
    query: str | None = None
    resource_type: ResourceType | None = None
    level: int | None = None
    department_id: uuid.UUID | None = None
    course_id: uuid.UUID | None = None


class EngagementCounter(enum.StrEnum):
    """Engagement counters that can be incremented atomically."""

    VIEWS = "views"
    DOWNLOADS = "downloads"
    SHARES = "shares"


class ResourceOrdering(enum.StrEnum):
    """Orderings used for curated resource lists."""

    FEATURED = "featured"
    TRENDING = "trending"
    RECENT = "recent"
    TOP_RATED = "top_rated"


__all__ = (
    "MAX_RATING_SCORE",
    "MIN_RATING_SCORE",
    "RESOURCE_LEVELS",
    "AccessLevel",
    "Caller",
    "EngagementCounter",
    "Rating",
    "Resource",
    "ResourceFilter",
    "ResourceOrdering",
    "ResourceSource",
    "ResourceType",
    "Role",
    "average_score",
    "normalise_tags",
)
