"""REST API adapters for the resource library.

This package exposes the Falcon application factory used by the runtime
entry point and by integration tests.

Examples
--------
>>> from librarian.api import create_app
>>> app = create_app(uow_factory, providers)  # doctest: +SKIP
"""

from __future__ import annotations

from .app import create_app

__all__ = ["create_app"]
