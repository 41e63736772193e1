"""Search entry point tying selection, fan-out, and aggregation together.

Examples
--------
>>> response = await search_resources(
...     SearchRequest(query="networks", sources=("local", "googleBooks")),
...     local_search=UnitOfWorkLocalSearch(uow_factory),
...     providers={"googleBooks": google_books},
...     timeout=8.0,
... )
>>> response.external_count
3
"""

from __future__ import annotations

import functools
import typing as typ

from librarian.logging import get_logger, log_info

from .aggregation import compose_response
from .fanout import fan_out
from .search import LOCAL_SOURCE
from .selection import select_sources

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .ports import LocalResourceSearch, SearchProvider
    from .search import SearchRequest, SearchResponse

logger = get_logger(__name__)


async def search_resources(
    request: SearchRequest,
    *,
    local_search: LocalResourceSearch,
    providers: cabc.Mapping[str, SearchProvider],
    timeout: float,
    correlation_id: str | None = None,
) -> SearchResponse:
    """Search the local library and the selected external providers.

    Parameters
    ----------
    request : SearchRequest
        Validated search request.
    local_search : LocalResourceSearch
        Paged local search adapter.
    providers : collections.abc.Mapping[str, SearchProvider]
        Registered providers keyed by source name, in default order.
    timeout : float
        Per-provider timeout in seconds.
    correlation_id : str | None, optional
        Identifier attached to fan-out tasks for tracing.

    Returns
    -------
    SearchResponse
        Aggregated envelope.

    Raises
    ------
    InvalidRequestError
        If the request cannot be searched.
    LocalStoreError
        If the local repository fails.
    """
    sources = select_sources(request, tuple(providers))
    local_call = (
        functools.partial(
            local_search.find, request.to_filter(), request.page, request.limit
        )
        if LOCAL_SOURCE in sources
        else None
    )
    selected = [providers[name] for name in sources if name != LOCAL_SOURCE]
    result = await fan_out(
        request.query or "",
        local_call,
        selected,
        max_results=request.limit,
        timeout=timeout,
        correlation_id=correlation_id,
    )
    response = compose_response(
        request.page, request.limit, result.local, result.outcomes
    )
    log_info(
        logger,
        "Search over %s returned %d local and %d external results.",
        ",".join(sources),
        response.local_total,
        response.external_count,
    )
    return response


__all__ = ("search_resources",)
