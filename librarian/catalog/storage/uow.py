"""Unit-of-work implementation for resource persistence.

Examples
--------
Commit work in a single unit-of-work:

>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     await uow.resources.add(resource)
...     await uow.commit()
"""

from __future__ import annotations

import typing as typ

from librarian.catalog.ports import CatalogUnitOfWork
from librarian.logging import get_logger, log_info

from .repositories import SqlAlchemyResourceRepository

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class SqlAlchemyUnitOfWork(CatalogUnitOfWork):
    """Async unit-of-work backed by SQLAlchemy sessions.

    Parameters
    ----------
    session_factory : collections.abc.Callable[[], AsyncSession]
        Factory that produces new async sessions for the unit-of-work scope.

    Attributes
    ----------
    resources : SqlAlchemyResourceRepository
        Repository for library resources.
    """

    def __init__(self, session_factory: cabc.Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        """Open a unit-of-work session.

        Returns
        -------
        SqlAlchemyUnitOfWork
            The active unit-of-work instance.
        """
        self._session = self._session_factory()
        self.resources = SqlAlchemyResourceRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the unit-of-work session, rolling back on error."""
        if self._session is None:
            return
        try:
            if exc is not None:
                await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None

    def _require_session(self) -> AsyncSession:
        """Return the active session or raise when missing."""
        if self._session is None:
            msg = "Session not initialized for unit of work."
            raise RuntimeError(msg)
        return self._session

    async def commit(self) -> None:
        """Commit the current unit-of-work transaction.

        Raises
        ------
        RuntimeError
            If no session has been initialized for the unit of work.
        """
        await self._require_session().commit()
        log_info(logger, "Committed resource unit of work.")

    async def flush(self) -> None:
        """Flush pending unit-of-work changes."""
        await self._require_session().flush()

    async def rollback(self) -> None:
        """Roll back the current unit-of-work session."""
        await self._require_session().rollback()
