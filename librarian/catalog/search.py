"""Search request and response value objects."""

from __future__ import annotations

import dataclasses as dc
import math
import typing as typ

from .domain import ResourceFilter

if typ.TYPE_CHECKING:
    import uuid

    from .candidates import CandidateRecord
    from .domain import Resource, ResourceType

#: Name of the local repository among the searchable sources.
LOCAL_SOURCE = "local"


@dc.dataclass(frozen=True, slots=True)
class SearchRequest:
    """Validated resource search request.

    Attributes
    ----------
    query : str | None
        Free-text query; ``None`` when only structured filters are used.
    resource_type : ResourceType | None
        Resource type filter.
    level : int | None
        Academic level filter.
    department_id, course_id : uuid.UUID | None
        Catalog association filters.
    sources : tuple[str, ...] | None
        Requested sources, or ``None`` for the configured default.
    page : int
        One-based local page number.
    limit : int
        Local page size and per-provider result cap.
    """

    query: str | None = None
    resource_type: ResourceType | None = None
    level: int | None = None
    department_id: uuid.UUID | None = None
    course_id: uuid.UUID | None = None
    sources: tuple[str, ...] | None = None
    page: int = 1
    limit: int = 20

    @property
    def has_filters(self) -> bool:
        """Return whether any structured filter is set."""
        return any(
            value is not None
            for value in (
                self.resource_type,
                self.level,
                self.department_id,
                self.course_id,
            )
        )

    def to_filter(self) -> ResourceFilter:
        """Build the local repository filter for public search."""
        return ResourceFilter(
            approved_only=True,
            query=self.query,
            resource_type=self.resource_type,
            level=self.level,
            department_id=self.department_id,
            course_id=self.course_id,
        )


@dc.dataclass(frozen=True, slots=True)
class LocalPage:
    """One page of local resources with the independently counted total."""

    items: tuple[Resource, ...]
    total: int

    @classmethod
    def empty(cls) -> LocalPage:
        """Return a page with no items and a zero total."""
        return cls(items=(), total=0)


@dc.dataclass(frozen=True, slots=True)
class ProviderOutcome:
    """Settled result of one provider call during fan-out."""

    name: str
    candidates: tuple[CandidateRecord, ...] = ()
    failed: bool = False
    reason: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Pagination:
    """Local pagination metadata."""

    page: int
    limit: int
    pages: int


@dc.dataclass(frozen=True, slots=True)
class SearchResponse:
    """Aggregated search envelope.

    Local results and external candidates stay in separate spaces; only the
    local results are paginated.
    """

    local: tuple[Resource, ...]
    local_total: int
    external: dict[str, tuple[CandidateRecord, ...]]
    pagination: Pagination
    failed_sources: tuple[str, ...] = ()

    @property
    def external_count(self) -> int:
        """Return the number of candidates across every provider."""
        return sum(len(candidates) for candidates in self.external.values())


def page_count(total: int, limit: int) -> int:
    """Return ``ceil(total / limit)``."""
    return math.ceil(total / limit)


__all__ = (
    "LOCAL_SOURCE",
    "LocalPage",
    "Pagination",
    "ProviderOutcome",
    "SearchRequest",
    "SearchResponse",
    "page_count",
)
