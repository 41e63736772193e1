"""Local repository search backed by a unit-of-work factory."""

from __future__ import annotations

import typing as typ

from .search import LocalPage

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .domain import ResourceFilter
    from .ports import CatalogUnitOfWork


class UnitOfWorkLocalSearch:
    """Run paged local searches inside a dedicated unit of work.

    The page query and the count query run one after the other in the same
    session. Results may shift between the two; ``total`` is authoritative
    for page arithmetic and the returned items are best effort.
    """

    def __init__(self, uow_factory: cabc.Callable[[], CatalogUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def find(
        self,
        resource_filter: ResourceFilter,
        page: int,
        limit: int,
    ) -> LocalPage:
        """Return page ``page`` of resources matching ``resource_filter``."""
        offset = (page - 1) * limit
        async with self._uow_factory() as uow:
            items = await uow.resources.find(
                resource_filter, offset=offset, limit=limit
            )
            total = await uow.resources.count(resource_filter)
        return LocalPage(items=tuple(items), total=total)


__all__ = ("UnitOfWorkLocalSearch",)
