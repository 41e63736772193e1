"""Falcon ASGI application factory for the resource library."""

from __future__ import annotations

import typing as typ

import falcon
from falcon import asgi

from librarian.catalog.access import AccessLevelPolicy
from librarian.catalog.errors import (
    AccessDeniedError,
    CatalogError,
    InvalidCandidateError,
    InvalidRatingError,
    InvalidRequestError,
    InvalidResourceError,
    LocalStoreError,
    ProviderUnavailableError,
    ResourceNotFoundError,
    ShareRejectedError,
)
from librarian.catalog.local_search import UnitOfWorkLocalSearch
from librarian.catalog.notifications import LoggingShareNotifier
from librarian.logging import get_logger, log_error
from librarian.settings import Settings

from .resources import (
    FeaturedResourcesResource,
    ResourceDetailResource,
    ResourceDownloadResource,
    ResourceImportResource,
    ResourceRatingResource,
    ResourceSearchResource,
    ResourcesResource,
    ResourceShareResource,
)
from .types import LibraryContext

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from librarian.catalog.ports import AccessPolicy, SearchProvider, ShareNotifier

    from .types import UowFactory

logger = get_logger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[CatalogError], str], ...] = (
    (InvalidRequestError, falcon.HTTP_400),
    (InvalidCandidateError, falcon.HTTP_400),
    (InvalidResourceError, falcon.HTTP_400),
    (InvalidRatingError, falcon.HTTP_400),
    (ShareRejectedError, falcon.HTTP_403),
    (ResourceNotFoundError, falcon.HTTP_404),
    (AccessDeniedError, falcon.HTTP_403),
    (LocalStoreError, falcon.HTTP_503),
    (ProviderUnavailableError, falcon.HTTP_503),
)


def status_for_error(error: CatalogError) -> str:
    """Return the HTTP status for a catalog error, ``500`` when unmapped."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return falcon.HTTP_500


async def handle_catalog_error(
    req: falcon.Request,
    resp: falcon.Response,
    ex: CatalogError,
    params: dict[str, object],
) -> None:
    """Render a ``CatalogError`` as the library's JSON error envelope."""
    del params
    status = status_for_error(ex)
    if status == falcon.HTTP_500:
        log_error(
            logger,
            "Unhandled catalog error on %s %s.",
            req.method,
            req.path,
            exc_info=ex,
        )
    resp.status = status
    resp.media = {
        "success": False,
        "code": ex.code,
        "message": str(ex),
        "retryable": ex.retryable,
    }


def create_app(  # noqa: PLR0913
    uow_factory: UowFactory,
    providers: cabc.Mapping[str, SearchProvider],
    *,
    settings: Settings | None = None,
    access_policy: AccessPolicy | None = None,
    notifier: ShareNotifier | None = None,
    middleware: cabc.Sequence[object] | None = None,
) -> asgi.App:
    """Build the Falcon ASGI application for the resource library.

    Parameters
    ----------
    uow_factory : UowFactory
        Factory for request-scoped units of work.
    providers : collections.abc.Mapping[str, SearchProvider]
        Registered external providers keyed by source name.
    settings : Settings | None, optional
        Runtime settings; defaults apply when omitted.
    access_policy : AccessPolicy | None, optional
        Access policy; ``AccessLevelPolicy`` when omitted.
    notifier : ShareNotifier | None, optional
        Share delivery port; ``LoggingShareNotifier`` when omitted.
    middleware : collections.abc.Sequence[object] | None, optional
        Falcon middleware components, such as a lifespan component.

    Returns
    -------
    falcon.asgi.App
        Application with every library route and the catalog error handler.
    """
    context = LibraryContext(
        uow_factory=uow_factory,
        local_search=UnitOfWorkLocalSearch(uow_factory),
        providers=dict(providers),
        access_policy=access_policy or AccessLevelPolicy(),
        notifier=notifier or LoggingShareNotifier(),
        settings=settings or Settings(),
    )
    app = asgi.App(middleware=list(middleware or ()))
    app.add_error_handler(CatalogError, handle_catalog_error)

    app.add_route("/resources", ResourcesResource(context))
    app.add_route("/resources/search", ResourceSearchResource(context))
    app.add_route("/resources/import", ResourceImportResource(context))
    app.add_route("/resources/featured", FeaturedResourcesResource(context))
    app.add_route("/resources/{resource_id}", ResourceDetailResource(context))
    app.add_route("/resources/{resource_id}/rate", ResourceRatingResource(context))
    app.add_route(
        "/resources/{resource_id}/download",
        ResourceDownloadResource(context),
    )
    app.add_route("/resources/{resource_id}/share", ResourceShareResource(context))
    return app


__all__ = ("create_app", "handle_catalog_error", "status_for_error")
