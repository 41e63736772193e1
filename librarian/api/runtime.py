"""Runtime composition for the resource library ASGI service.

Serve the application with any ASGI server, for example::

    uvicorn --factory librarian.api.runtime:app
"""

from __future__ import annotations

import typing as typ

import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from librarian.catalog.storage import SqlAlchemyUnitOfWork, apply_migrations
from librarian.logging import configure_logging, get_logger, log_info, log_warning
from librarian.providers import build_default_providers
from librarian.settings import load_settings

from .app import create_app

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon import asgi
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = get_logger(__name__)


class LifespanComponent:
    """Apply migrations on start-up and release shared clients on shutdown."""

    def __init__(self, engine: AsyncEngine, client: httpx.AsyncClient) -> None:
        self._engine = engine
        self._client = client

    async def process_startup(
        self,
        scope: dict[str, object],
        event: dict[str, object],
    ) -> None:
        """Bring the schema up to date before serving requests."""
        del scope, event
        await apply_migrations(self._engine)
        log_info(logger, "Resource library schema is up to date.")

    async def process_shutdown(
        self,
        scope: dict[str, object],
        event: dict[str, object],
    ) -> None:
        """Close the provider client and dispose of the engine."""
        del scope, event
        await self._client.aclose()
        await self._engine.dispose()


def create_runtime_app(env: cabc.Mapping[str, str] | None = None) -> asgi.App:
    """Compose the application from environment settings.

    Parameters
    ----------
    env : collections.abc.Mapping[str, str] | None, optional
        Environment mapping; ``os.environ`` when omitted.

    Returns
    -------
    falcon.asgi.App
        Application wired to PostgreSQL and the default providers.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not configured.
    """
    settings = load_settings(env)
    if settings.database_url is None:
        msg = "DATABASE_URL must be set to run the resource library."
        raise RuntimeError(msg)
    level, used_default = configure_logging(settings.log_level)
    if used_default and settings.log_level is not None:
        log_warning(
            logger,
            "Unknown log level %r; using %s.",
            settings.log_level,
            level,
        )

    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.provider_timeout),
        follow_redirects=True,
    )
    providers = build_default_providers(settings, client)
    log_info(
        logger,
        "Registered providers: %s.",
        ", ".join(
            f"{name}{'' if provider.enabled else ' (disabled)'}"
            for name, provider in providers.items()
        ),
    )
    return create_app(
        lambda: SqlAlchemyUnitOfWork(session_factory),
        providers,
        settings=settings,
        middleware=[LifespanComponent(engine, client)],
    )


def app() -> asgi.App:
    """Return the application for ASGI servers that accept factories."""
    return create_runtime_app()


__all__ = ("LifespanComponent", "app", "create_runtime_app")
