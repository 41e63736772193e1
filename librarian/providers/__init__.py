"""External bibliographic provider adapters.

Every adapter implements ``search(query, max_results)`` on top of
``HttpSearchProvider`` and keeps its provider's wire format private to its
module's ``normalize`` function.
"""

from __future__ import annotations

import typing as typ

from .arxiv import ArxivProvider
from .base import HttpSearchProvider
from .core import CoreProvider
from .google_books import GoogleBooksProvider
from .open_library import OpenLibraryProvider

if typ.TYPE_CHECKING:
    import httpx

    from librarian.settings import Settings

PROVIDER_TYPES: tuple[type[HttpSearchProvider], ...] = (
    GoogleBooksProvider,
    OpenLibraryProvider,
    CoreProvider,
    ArxivProvider,
)


def build_default_providers(
    settings: Settings,
    client: httpx.AsyncClient,
) -> dict[str, HttpSearchProvider]:
    """Instantiate every known provider on the shared ``client``.

    Parameters
    ----------
    settings : Settings
        Runtime settings supplying provider credentials.
    client : httpx.AsyncClient
        Shared HTTP client.

    Returns
    -------
    dict[str, HttpSearchProvider]
        Providers keyed by source name, in default search order. Providers
        whose required credential is missing are still registered; their
        searches settle as failed without network I/O.
    """
    return {
        provider_type.name: provider_type(
            client, settings.credential_for(provider_type.name)
        )
        for provider_type in PROVIDER_TYPES
    }


__all__ = (
    "PROVIDER_TYPES",
    "ArxivProvider",
    "CoreProvider",
    "GoogleBooksProvider",
    "HttpSearchProvider",
    "OpenLibraryProvider",
    "build_default_providers",
)
