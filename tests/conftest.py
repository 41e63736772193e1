"""Pytest fixtures for database-backed and API tests.

Database fixtures start a py-pglite Postgres, apply the Alembic migrations,
and hand out session factories bound to it.

Examples
--------
Run the suite without the database-backed tests:

>>> LIBRARIAN_TEST_DB=sqlite pytest
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import typing as typ

import pytest
import pytest_asyncio
import sqlalchemy as sa
import sqlalchemy.exc as sa_exc

from librarian.catalog.storage.alembic_helpers import apply_migrations

if typ.TYPE_CHECKING:
    from pathlib import Path

    from falcon import testing
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from _catalog_helpers import InMemoryUnitOfWork, StaticProvider

try:
    from py_pglite import PGliteConfig, PGliteManager

    _PGLITE_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    _PGLITE_AVAILABLE = False


def _should_use_pglite() -> bool:
    """Return True when tests should attempt py-pglite.

    If a non-SQLite backend is requested but py-pglite is unavailable,
    fail fast with a clear error instead of silently skipping tests.
    """
    target = os.getenv("LIBRARIAN_TEST_DB", "pglite").lower()
    if target == "sqlite":
        return False
    if not _PGLITE_AVAILABLE:
        msg = (
            "Database-backed tests requested via LIBRARIAN_TEST_DB="
            f"{target!r}, but py-pglite is not installed. Install the test "
            "extra or set LIBRARIAN_TEST_DB=sqlite."
        )
        raise RuntimeError(msg)
    return True


@contextlib.asynccontextmanager
async def _pglite_engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Start a py-pglite Postgres and yield an async engine bound to it."""
    work_dir = tmp_path / "pglite"
    config = PGliteConfig(work_dir=work_dir)

    with PGliteManager(config):
        from sqlalchemy.ext.asyncio import create_async_engine

        dsn = config.get_connection_string()
        engine = create_async_engine(dsn, pool_pre_ping=True)
        try:
            await _wait_for_engine_ready(engine)
            yield engine
        finally:
            await engine.dispose()


async def _wait_for_engine_ready(engine: AsyncEngine) -> None:
    """Wait for py-pglite to accept SQLAlchemy connections.

    py-pglite can report startup before the socket accepts the first
    connection.
    """
    max_attempts = 30
    delay_seconds = 0.1
    for attempt in range(1, max_attempts + 1):
        try:
            async with engine.connect() as connection:
                await connection.execute(sa.text("SELECT 1"))
        except sa_exc.OperationalError:
            if attempt == max_attempts:
                raise
            await asyncio.sleep(delay_seconds)
        else:
            return


@pytest_asyncio.fixture
async def pglite_engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Yield an async engine backed by py-pglite Postgres."""
    if not _should_use_pglite():
        pytest.skip("LIBRARIAN_TEST_DB=sqlite disables py-pglite-backed fixtures.")

    async with _pglite_engine(tmp_path) as engine:
        yield engine


@pytest_asyncio.fixture
async def migrated_engine(
    pglite_engine: AsyncEngine,
) -> typ.AsyncIterator[AsyncEngine]:
    """Yield a py-pglite engine with migrations applied."""
    await apply_migrations(pglite_engine)
    yield pglite_engine


@pytest.fixture
def session_factory(
    migrated_engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Yield an async session factory bound to the migrated engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        migrated_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def memory_uow() -> InMemoryUnitOfWork:
    """Return an empty in-memory unit of work."""
    from _catalog_helpers import InMemoryUnitOfWork

    return InMemoryUnitOfWork()


@pytest.fixture
def google_books_stub() -> StaticProvider:
    """Return a book catalog provider answering with three volumes."""
    from _catalog_helpers import StaticProvider, make_candidate

    return StaticProvider(
        name="googleBooks",
        source_name="Google Books",
        candidates=tuple(
            make_candidate(f"vol-{index}", title=f"Networks volume {index}")
            for index in range(1, 4)
        ),
    )


@pytest.fixture
def memory_api_client(
    memory_uow: InMemoryUnitOfWork,
    google_books_stub: StaticProvider,
) -> testing.TestClient:
    """Build a Falcon test client over the in-memory unit of work."""
    from falcon import testing

    from librarian.api import create_app

    app = create_app(lambda: memory_uow, {"googleBooks": google_books_stub})
    return testing.TestClient(app)

