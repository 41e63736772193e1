"""Alembic helpers shared by runtime start-up and the test fixtures.

Examples
--------
Bring a fresh database up to the latest resource library schema:

>>> await apply_migrations(engine)
"""

from __future__ import annotations

import pathlib
import typing as typ

from alembic.config import Config

from alembic import command

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.ext.asyncio import AsyncEngine

_REPOSITORY_ROOT = pathlib.Path(__file__).resolve().parents[3]
MIGRATION_HEAD = "head"


def alembic_config(database_url: str) -> Config:
    """Return an Alembic ``Config`` for the repository's migration scripts.

    ``%`` in ``database_url`` is doubled because Alembic stores options in a
    ConfigParser.
    """
    cfg = Config(str(_REPOSITORY_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(_REPOSITORY_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def _upgrade(connection: Connection, cfg: Config, revision: str) -> None:
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, revision)


async def apply_migrations(
    engine: AsyncEngine,
    revision: str = MIGRATION_HEAD,
) -> None:
    """Upgrade the database behind ``engine`` to ``revision``.

    Parameters
    ----------
    engine : AsyncEngine
        Engine bound to the target database.
    revision : str, optional
        Target revision; defaults to the latest one.
    """
    cfg = alembic_config(engine.url.render_as_string(hide_password=False))
    async with engine.begin() as connection:
        await connection.run_sync(_upgrade, cfg, revision)
