"""CORE open-access research API provider.

CORE requires an API key; without one the provider is disabled and searches
settle immediately without network I/O.
"""

from __future__ import annotations

import typing as typ

from librarian.catalog.candidates import (
    UNKNOWN_AUTHORS,
    CandidateRecord,
    ProviderCategory,
)

from ._coercion import coerce_mapping, coerce_records, coerce_str, http_url
from .base import HttpSearchProvider, json_payload

if typ.TYPE_CHECKING:
    import httpx

SOURCE_NAME = "CORE"


def _author_names(value: object) -> tuple[str, ...]:
    """Read author names from CORE's author objects or plain strings."""
    names: list[str] = []
    for author in coerce_records(value):
        name = (
            coerce_str(author)
            if isinstance(author, str)
            else coerce_str(coerce_mapping(author).get("name"))
        )
        if name is not None:
            names.append(name)
    return tuple(names)


def normalize(raw: object) -> CandidateRecord | None:
    """Map a CORE output record to a candidate.

    The download URL is preferred as the preview link. Records without an
    ``id`` are skipped.
    """
    paper = coerce_mapping(raw)
    paper_id = coerce_str(paper.get("id"))
    if paper_id is None:
        return None
    landing = http_url(paper.get("url"))
    download = http_url(paper.get("downloadUrl"))
    return CandidateRecord(
        id=paper_id,
        title=coerce_str(paper.get("title")) or "",
        description=coerce_str(paper.get("description"))
        or coerce_str(paper.get("abstract"))
        or "",
        authors=_author_names(paper.get("authors")) or UNKNOWN_AUTHORS,
        published_date=coerce_str(paper.get("year"))
        or coerce_str(paper.get("yearPublished")),
        thumbnail=None,
        preview_link=download or landing,
        info_link=landing,
        source_name=SOURCE_NAME,
        external_id=paper_id,
    )


class CoreProvider(HttpSearchProvider):
    """Search CORE with a bearer API key."""

    name = "core"
    source_name = SOURCE_NAME
    category = ProviderCategory.OPEN_ACCESS
    endpoint = "https://core.ac.uk/api-v2/search"
    requires_credential = True
    normalize = staticmethod(normalize)

    def build_params(self, query: str, max_results: int) -> dict[str, str | int]:
        return {"q": query, "limit": max_results}

    def build_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._credential}"}

    def extract_records(self, response: httpx.Response) -> list[object]:
        payload = json_payload(response)
        return coerce_records(payload.get("data") or payload.get("results"))


__all__ = ("SOURCE_NAME", "CoreProvider", "normalize")
