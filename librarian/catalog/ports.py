"""Ports for the resource library.

Protocols in this module describe the boundaries the catalog services depend
on: persistence, local search, external providers, access control, and share
delivery. Adapters live in ``librarian.catalog.storage``,
``librarian.providers``, ``librarian.catalog.access`` and
``librarian.catalog.notifications``.

Examples
--------
Implement a provider that satisfies the protocol:

>>> class StaticProvider:
...     name = "static"
...     async def search(self, query: str, max_results: int) -> list[CandidateRecord]:
...         return []
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import uuid
    from types import TracebackType

    from .candidates import CandidateRecord, ProviderCategory
    from .domain import (
        Caller,
        EngagementCounter,
        Rating,
        Resource,
        ResourceFilter,
        ResourceOrdering,
        ResourceType,
    )
    from .engagement import ShareNotice
    from .search import LocalPage


class ResourceRepository(typ.Protocol):
    """Persistence interface for library resources.

    Methods
    -------
    add(resource)
        Persist a new resource.
    add_imported(resource)
        Persist an imported resource unless its provenance already exists.
    get(resource_id)
        Fetch a resource by identifier.
    get_for_update(resource_id)
        Fetch a resource and lock its row for the current transaction.
    get_by_source(source_name, external_id)
        Fetch an imported resource by provenance.
    find(resource_filter, offset, limit)
        List resources matching a filter in search order.
    count(resource_filter)
        Count resources matching a filter.
    increment(resource_id, counter)
        Atomically increment an engagement counter.
    upsert_rating(resource_id, rating)
        Insert or replace the rater's rating.
    refresh_average(resource_id)
        Recompute the stored average rating.
    list_related(resource, limit)
        List approved resources related to ``resource``.
    list_ordered(ordering, limit, resource_type)
        List approved resources in a curated ordering.
    """

    async def add(self, resource: Resource) -> None:
        """Persist a resource.

        Parameters
        ----------
        resource : Resource
            Resource entity to persist.

        Returns
        -------
        None
        """
        ...

    async def add_imported(self, resource: Resource) -> bool:
        """Persist an imported resource unless its provenance pair exists.

        Returns
        -------
        bool
            ``True`` when the resource was inserted, ``False`` when another
            resource already holds the same ``(source_name, external_id)``.
        """
        ...

    async def get(self, resource_id: uuid.UUID) -> Resource | None:
        """Fetch a resource by identifier, or ``None`` when missing."""
        ...

    async def get_for_update(self, resource_id: uuid.UUID) -> Resource | None:
        """Fetch a resource and hold a row lock until the transaction ends."""
        ...

    async def get_by_source(
        self,
        source_name: str,
        external_id: str,
    ) -> Resource | None:
        """Fetch the resource imported from ``(source_name, external_id)``."""
        ...

    async def find(
        self,
        resource_filter: ResourceFilter,
        *,
        offset: int,
        limit: int,
    ) -> list[Resource]:
        """List resources matching ``resource_filter``.

        Parameters
        ----------
        resource_filter : ResourceFilter
            Structured filter, optionally carrying a free-text query.
        offset : int
            Number of matching resources to skip.
        limit : int
            Maximum number of resources to return.

        Returns
        -------
        list[Resource]
            Resources ordered by relevance when a query is present, else
            most recent first.
        """
        ...

    async def count(self, resource_filter: ResourceFilter) -> int:
        """Count resources matching ``resource_filter``."""
        ...

    async def increment(
        self,
        resource_id: uuid.UUID,
        counter: EngagementCounter,
    ) -> int | None:
        """Increment ``counter`` and return its new value.

        Returns
        -------
        int | None
            The incremented value, or ``None`` when the resource is missing.
        """
        ...

    async def upsert_rating(self, resource_id: uuid.UUID, rating: Rating) -> None:
        """Insert ``rating`` or replace the rater's existing rating."""
        ...

    async def refresh_average(self, resource_id: uuid.UUID) -> tuple[float, int]:
        """Recompute the average rating and return ``(average, count)``."""
        ...

    async def list_related(self, resource: Resource, *, limit: int) -> list[Resource]:
        """List approved resources sharing courses, type or tags."""
        ...

    async def list_ordered(
        self,
        ordering: ResourceOrdering,
        *,
        limit: int,
        resource_type: ResourceType | None = None,
    ) -> list[Resource]:
        """List approved resources for a curated ordering."""
        ...


class CatalogUnitOfWork(typ.Protocol):
    """Unit-of-work boundary for resource persistence.

    Attributes
    ----------
    resources : ResourceRepository
        Repository for library resources.
    """

    resources: ResourceRepository

    async def __aenter__(self) -> CatalogUnitOfWork:
        """Enter the unit-of-work context."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Exit the unit-of-work context, rolling back on error."""
        ...

    async def commit(self) -> None:
        """Commit the current unit-of-work transaction."""
        ...

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        ...

    async def rollback(self) -> None:
        """Roll back the current unit-of-work transaction."""
        ...


class LocalResourceSearch(typ.Protocol):
    """Paged local search used by the fan-out orchestrator."""

    async def find(
        self,
        resource_filter: ResourceFilter,
        page: int,
        limit: int,
    ) -> LocalPage:
        """Return one page of matches and the independent total count."""
        ...


class SearchProvider(typ.Protocol):
    """External bibliographic provider.

    Attributes
    ----------
    name : str
        Source name used in requests and response envelopes.
    category : ProviderCategory
        Provider kind, used to type imported resources.
    source_name : str
        Human-readable name stamped on produced candidates.
    """

    name: str
    category: ProviderCategory
    source_name: str

    async def search(self, query: str, max_results: int) -> list[CandidateRecord]:
        """Search the provider.

        Implementations resolve ordinary failures to an empty list.
        """
        ...


class AccessPolicy(typ.Protocol):
    """Decides whether a caller may open a resource."""

    def can_access(self, caller: Caller, resource: Resource) -> bool:
        """Return whether ``caller`` may view or download ``resource``."""
        ...


class ShareNotifier(typ.Protocol):
    """Delivers share notices to study groups or users."""

    async def deliver(self, notice: ShareNotice) -> None:
        """Deliver ``notice``.

        Raises
        ------
        ShareRejectedError
            If the recipient refuses the notice, for example when the sender
            is not a member of the target group.
        """
        ...


__all__ = (
    "AccessPolicy",
    "CatalogUnitOfWork",
    "LocalResourceSearch",
    "ResourceRepository",
    "SearchProvider",
    "ShareNotifier",
)
