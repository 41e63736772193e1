"""Tests for runtime composition of the ASGI service."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import httpx
import pytest

from librarian.api.runtime import LifespanComponent, create_runtime_app

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


@dc.dataclass(slots=True)
class _RecordingEngine:
    disposed: bool = False

    async def dispose(self) -> None:
        self.disposed = True


def test_runtime_requires_database_url() -> None:
    """Refuse to start without a database."""
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        create_runtime_app({"LIBRARIAN_LOG_LEVEL": "warning"})


@pytest.mark.asyncio
async def test_lifespan_shutdown_releases_clients() -> None:
    """Close the provider client and dispose of the engine on shutdown."""
    engine = _RecordingEngine()
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(204))
    )
    component = LifespanComponent(typ.cast("AsyncEngine", engine), client)

    await component.process_shutdown({}, {})

    assert client.is_closed
    assert engine.disposed is True
