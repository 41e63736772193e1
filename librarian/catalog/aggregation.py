"""Compose the search envelope from the local page and provider outcomes."""

from __future__ import annotations

import typing as typ

from .search import Pagination, SearchResponse, page_count

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .candidates import CandidateRecord
    from .search import LocalPage, ProviderOutcome


def compose_response(
    page: int,
    limit: int,
    local: LocalPage,
    outcomes: cabc.Iterable[ProviderOutcome],
) -> SearchResponse:
    """Merge the local page and per-provider candidates into one response.

    Parameters
    ----------
    page : int
        Requested local page.
    limit : int
        Local page size.
    local : LocalPage
        Local page and its independently counted total.
    outcomes : collections.abc.Iterable[ProviderOutcome]
        Settled provider outcomes. Failed providers contribute an empty list
        and are listed in ``failed_sources``.

    Returns
    -------
    SearchResponse
        Envelope whose pagination describes the local results only.
    """
    external: dict[str, tuple[CandidateRecord, ...]] = {}
    failed: list[str] = []
    for outcome in outcomes:
        external[outcome.name] = outcome.candidates
        if outcome.failed:
            failed.append(outcome.name)
    return SearchResponse(
        local=local.items,
        local_total=local.total,
        external=external,
        pagination=Pagination(
            page=page,
            limit=limit,
            pages=page_count(local.total, limit),
        ),
        failed_sources=tuple(failed),
    )


__all__ = ("compose_response",)
