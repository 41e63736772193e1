"""Shared types for the Falcon resource library adapter.

Example
-------
Define a unit-of-work factory:

>>> factory: UowFactory = (  # doctest: +SKIP
...     lambda: SqlAlchemyUnitOfWork(session_factory)
... )
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from librarian.catalog.ports import (
        AccessPolicy,
        CatalogUnitOfWork,
        LocalResourceSearch,
        SearchProvider,
        ShareNotifier,
    )
    from librarian.settings import Settings

type UowFactory = cabc.Callable[[], CatalogUnitOfWork]
type JsonPayload = dict[str, object]


@dc.dataclass(frozen=True, slots=True)
class LibraryContext:
    """Collaborators shared by every resource library endpoint.

    Attributes
    ----------
    uow_factory : UowFactory
        Factory for request-scoped units of work.
    local_search : LocalResourceSearch
        Paged local search used by the search endpoint.
    providers : collections.abc.Mapping[str, SearchProvider]
        Registered external providers keyed by source name.
    access_policy : AccessPolicy
        Policy consulted before detail and download.
    notifier : ShareNotifier
        Delivery port for share notices.
    settings : Settings
        Runtime settings (page limits, provider timeout).
    """

    uow_factory: UowFactory
    local_search: LocalResourceSearch
    providers: cabc.Mapping[str, SearchProvider]
    access_policy: AccessPolicy
    notifier: ShareNotifier
    settings: Settings
