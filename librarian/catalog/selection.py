"""Source selection for resource searches.

Filter-only searches have no meaningful counterpart in unstructured external
catalogs, so they run against the local repository alone.

Examples
--------
>>> select_sources(SearchRequest(level=200), ("googleBooks",))
('local',)
>>> select_sources(SearchRequest(query="graphs"), ("googleBooks", "arxiv"))
('local', 'googleBooks', 'arxiv')
"""

from __future__ import annotations

import typing as typ

from .errors import InvalidRequestError
from .search import LOCAL_SOURCE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .search import SearchRequest


def _dedupe(names: cabc.Iterable[str]) -> tuple[str, ...]:
    """Drop repeated names while keeping the first occurrence order."""
    return tuple(dict.fromkeys(names))


def select_sources(
    request: SearchRequest,
    available: cabc.Sequence[str],
) -> tuple[str, ...]:
    """Return the sources that should run for ``request``.

    Parameters
    ----------
    request : SearchRequest
        Incoming search request.
    available : collections.abc.Sequence[str]
        Names of the registered external providers, in default order.

    Returns
    -------
    tuple[str, ...]
        Effective sources. ``("local",)`` whenever the request has no
        free-text query; otherwise the requested sources (or ``local`` plus
        every registered provider) with duplicates removed.

    Raises
    ------
    InvalidRequestError
        If the request has neither a query nor a structured filter, or names
        an unknown source.
    """
    if request.query is None and not request.has_filters:
        msg = "Provide a search query or at least one filter."
        raise InvalidRequestError(msg)

    known = {LOCAL_SOURCE, *available}
    requested = request.sources or (LOCAL_SOURCE, *available)
    unknown = [name for name in _dedupe(requested) if name not in known]
    if unknown:
        msg = f"Unknown search sources: {', '.join(unknown)}."
        raise InvalidRequestError(msg)

    if request.query is None:
        return (LOCAL_SOURCE,)
    return _dedupe(requested)


__all__ = ("select_sources",)
