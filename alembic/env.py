"""Alembic environment for the resource library's async migrations."""

from __future__ import annotations

import asyncio
import typing as typ
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import AsyncConnection, async_engine_from_config

from alembic import context
from librarian.catalog.storage import Base
from librarian.settings import load_settings

config = context.config

if config.config_file_name:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Connection


def _configure_database_url() -> None:
    """Set sqlalchemy.url from ``DATABASE_URL`` unless already configured."""
    database_url = load_settings().database_url
    if database_url:
        config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
        return
    if not config.get_main_option("sqlalchemy.url"):
        msg = "DATABASE_URL is not set and sqlalchemy.url is empty."
        raise RuntimeError(msg)


def run_migrations_offline() -> None:
    """Emit migration SQL without a database connection."""
    _configure_database_url()
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def _do_run_migrations(connection: Connection) -> None:
    """Configure the context on ``connection`` and run migrations."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def _run_migrations_with_engine() -> None:
    """Create a throwaway async engine and migrate through it."""
    _configure_database_url()
    section = config.get_section(config.config_ini_section) or {}
    engine = async_engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with engine.connect() as connection:
        await connection.run_sync(_do_run_migrations)
    await engine.dispose()


def run_migrations_online() -> None:
    """Run migrations on a supplied connection or a new async engine.

    ``apply_migrations`` passes its connection through
    ``config.attributes["connection"]``; the command-line tool does not.
    """
    connection = config.attributes.get("connection")
    if connection is None:
        asyncio.run(_run_migrations_with_engine())
    elif isinstance(connection, AsyncConnection):
        asyncio.run(connection.run_sync(_do_run_migrations))
    else:
        _do_run_migrations(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
