"""SQLAlchemy repositories for the resource library.

This module implements the resource repository adapter. It operates within a
supplied async session and is composed through the unit-of-work.

Full-text search matches a document built from the title, description,
author and tags with ``websearch_to_tsquery`` and orders matches by
``ts_rank``. Counter and rating writes are single statements so that
concurrent requests never lose updates.

Examples
--------
>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     items = await uow.resources.find(
...         ResourceFilter(query="graphs"), offset=0, limit=20
...     )
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from librarian.catalog.domain import ResourceOrdering

from .mappers import (
    _rating_to_values,
    _resource_from_record,
    _resource_to_record,
    _resource_to_values,
)
from .models import ResourceRatingRecord, ResourceRecord

if typ.TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from librarian.catalog.domain import (
        EngagementCounter,
        Rating,
        Resource,
        ResourceFilter,
        ResourceType,
    )

_TEXT_SEARCH_CONFIG = "english"


def _search_document() -> sa.ColumnElement[typ.Any]:
    """Return the tsvector searched by free-text queries."""
    text = sa.func.concat_ws(
        " ",
        ResourceRecord.title,
        ResourceRecord.description,
        ResourceRecord.author,
        sa.func.array_to_string(ResourceRecord.tags, " "),
    )
    return sa.func.to_tsvector(_TEXT_SEARCH_CONFIG, text)


def _search_query(query: str) -> sa.ColumnElement[typ.Any]:
    return sa.func.websearch_to_tsquery(_TEXT_SEARCH_CONFIG, query)


def _filter_conditions(
    resource_filter: ResourceFilter,
) -> list[sa.ColumnElement[bool]]:
    """Translate a resource filter into SQL conditions."""
    conditions: list[sa.ColumnElement[bool]] = []
    if resource_filter.approved_only:
        conditions.append(ResourceRecord.is_approved.is_(True))
    if resource_filter.query:
        conditions.append(
            _search_document().op("@@")(_search_query(resource_filter.query))
        )
    if resource_filter.resource_type is not None:
        conditions.append(ResourceRecord.resource_type == resource_filter.resource_type)
    if resource_filter.level is not None:
        conditions.append(ResourceRecord.level == resource_filter.level)
    if resource_filter.department_id is not None:
        conditions.append(
            ResourceRecord.department_ids.contains([resource_filter.department_id])
        )
    if resource_filter.course_id is not None:
        conditions.append(
            ResourceRecord.course_ids.contains([resource_filter.course_id])
        )
    return conditions


def _rating_count() -> sa.ScalarSelect[int]:
    return (
        sa.select(sa.func.count())
        .where(ResourceRatingRecord.resource_id == ResourceRecord.id)
        .correlate(ResourceRecord)
        .scalar_subquery()
    )


@dc.dataclass(slots=True)
class _RepositoryBase:
    """Shared helpers for SQLAlchemy repositories."""

    _session: AsyncSession

    async def _list(
        self,
        statement: sa.Select[tuple[ResourceRecord]],
    ) -> list[Resource]:
        """Execute a record select and map the results."""
        result = await self._session.execute(statement)
        return [_resource_from_record(record) for record in result.scalars()]


class SqlAlchemyResourceRepository(_RepositoryBase):
    """Persist and query library resources."""

    async def add(self, resource: Resource) -> None:
        """Add a resource record to the session."""
        self._session.add(_resource_to_record(resource))

    async def add_imported(self, resource: Resource) -> bool:
        """Insert an imported resource unless its provenance pair exists."""
        statement = (
            postgresql.insert(ResourceRecord)
            .values(**_resource_to_values(resource))
            .on_conflict_do_nothing(
                index_elements=["source_name", "source_external_id"],
                index_where=ResourceRecord.source_external_id.is_not(None),
            )
            .returning(ResourceRecord.id)
        )
        result = await self._session.execute(statement)
        return result.scalar_one_or_none() is not None

    async def get(self, resource_id: uuid.UUID) -> Resource | None:
        """Fetch a resource by identifier."""
        statement = (
            sa.select(ResourceRecord)
            .where(ResourceRecord.id == resource_id)
            .execution_options(populate_existing=True)
        )
        record = (await self._session.execute(statement)).scalar_one_or_none()
        return None if record is None else _resource_from_record(record)

    async def get_for_update(self, resource_id: uuid.UUID) -> Resource | None:
        """Fetch a resource and lock its row until the transaction ends."""
        statement = (
            sa.select(ResourceRecord)
            .where(ResourceRecord.id == resource_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        record = (await self._session.execute(statement)).scalar_one_or_none()
        return None if record is None else _resource_from_record(record)

    async def get_by_source(
        self,
        source_name: str,
        external_id: str,
    ) -> Resource | None:
        """Fetch the resource imported from ``(source_name, external_id)``."""
        statement = sa.select(ResourceRecord).where(
            ResourceRecord.source_name == source_name,
            ResourceRecord.source_external_id == external_id,
        )
        record = (await self._session.execute(statement)).scalar_one_or_none()
        return None if record is None else _resource_from_record(record)

    async def find(
        self,
        resource_filter: ResourceFilter,
        *,
        offset: int,
        limit: int,
    ) -> list[Resource]:
        """List resources matching a filter.

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
            Matches by descending relevance when a query is present, else
            most recent first; ``id`` breaks ties so pages are stable.
        """
        statement = sa.select(ResourceRecord).where(
            *_filter_conditions(resource_filter)
        )
        if resource_filter.query:
            rank = sa.func.ts_rank(
                _search_document(), _search_query(resource_filter.query)
            )
            statement = statement.order_by(
                rank.desc(),
                ResourceRecord.created_at.desc(),
                ResourceRecord.id.desc(),
            )
        else:
            statement = statement.order_by(
                ResourceRecord.created_at.desc(),
                ResourceRecord.id.desc(),
            )
        return await self._list(statement.offset(offset).limit(limit))

    async def count(self, resource_filter: ResourceFilter) -> int:
        """Count resources matching a filter."""
        statement = (
            sa.select(sa.func.count())
            .select_from(ResourceRecord)
            .where(*_filter_conditions(resource_filter))
        )
        return int((await self._session.execute(statement)).scalar_one())

    async def increment(
        self,
        resource_id: uuid.UUID,
        counter: EngagementCounter,
    ) -> int | None:
        """Increment an engagement counter in place and return its new value."""
        column = getattr(ResourceRecord, counter.value)
        statement = (
            sa.update(ResourceRecord)
            .where(ResourceRecord.id == resource_id)
            .values({column: column + 1})
            .returning(column)
            .execution_options(synchronize_session=False)
        )
        return (await self._session.execute(statement)).scalar_one_or_none()

    async def upsert_rating(self, resource_id: uuid.UUID, rating: Rating) -> None:
        """Insert a rating or replace the rater's existing one."""
        insert = postgresql.insert(ResourceRatingRecord).values(
            **_rating_to_values(resource_id, rating)
        )
        statement = insert.on_conflict_do_update(
            index_elements=["resource_id", "rater_id"],
            set_={
                "score": insert.excluded.score,
                "review": insert.excluded.review,
                "rated_at": insert.excluded.rated_at,
            },
        )
        await self._session.execute(statement)

    async def refresh_average(self, resource_id: uuid.UUID) -> tuple[float, int]:
        """Recompute and store the mean score from the rating rows."""
        stats = sa.select(
            sa.func.coalesce(sa.func.avg(ResourceRatingRecord.score), 0),
            sa.func.count(),
        ).where(ResourceRatingRecord.resource_id == resource_id)
        average_raw, count = (await self._session.execute(stats)).one()
        average = float(average_raw)
        await self._session.execute(
            sa.update(ResourceRecord)
            .where(ResourceRecord.id == resource_id)
            .values(average_rating=average, updated_at=sa.func.now())
            .execution_options(synchronize_session=False)
        )
        return (average, int(count))

    async def list_related(self, resource: Resource, *, limit: int) -> list[Resource]:
        """List approved resources sharing courses, the type, or tags."""
        related: list[sa.ColumnElement[bool]] = [
            ResourceRecord.resource_type == resource.resource_type
        ]
        if resource.course_ids:
            related.append(ResourceRecord.course_ids.overlap(list(resource.course_ids)))
        if resource.tags:
            related.append(ResourceRecord.tags.overlap(list(resource.tags)))
        statement = (
            sa.select(ResourceRecord)
            .where(
                ResourceRecord.id != resource.id,
                ResourceRecord.is_approved.is_(True),
                sa.or_(*related),
            )
            .order_by(ResourceRecord.created_at.desc(), ResourceRecord.id.desc())
            .limit(limit)
        )
        return await self._list(statement)

    async def list_ordered(
        self,
        ordering: ResourceOrdering,
        *,
        limit: int,
        resource_type: ResourceType | None = None,
    ) -> list[Resource]:
        """List approved resources in a curated ordering."""
        statement = sa.select(ResourceRecord).where(
            ResourceRecord.is_approved.is_(True)
        )
        if resource_type is not None:
            statement = statement.where(ResourceRecord.resource_type == resource_type)
        match ordering:
            case ResourceOrdering.FEATURED:
                statement = statement.where(
                    ResourceRecord.is_featured.is_(True)
                ).order_by(ResourceRecord.created_at.desc())
            case ResourceOrdering.TRENDING:
                statement = statement.order_by(
                    ResourceRecord.views.desc(),
                    ResourceRecord.downloads.desc(),
                    ResourceRecord.created_at.desc(),
                )
            case ResourceOrdering.RECENT:
                statement = statement.order_by(ResourceRecord.created_at.desc())
            case ResourceOrdering.TOP_RATED:
                statement = statement.where(_rating_count() > 0).order_by(
                    ResourceRecord.average_rating.desc(),
                    _rating_count().desc(),
                )
        statement = statement.order_by(ResourceRecord.id.desc()).limit(limit)
        return await self._list(statement)
