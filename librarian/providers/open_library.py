"""Open Library search API provider."""

from __future__ import annotations

import typing as typ

from librarian.catalog.candidates import (
    UNKNOWN_AUTHORS,
    CandidateRecord,
    ProviderCategory,
)

from ._coercion import coerce_mapping, coerce_records, coerce_str, coerce_str_list
from .base import HttpSearchProvider, json_payload

if typ.TYPE_CHECKING:
    import httpx

SOURCE_NAME = "Open Library"
_SITE = "https://openlibrary.org"
_COVER_URL = "https://covers.openlibrary.org/b/id/{cover_id}-M.jpg"


def normalize(raw: object) -> CandidateRecord | None:
    """Map an Open Library search document to a candidate.

    Documents without a work ``key`` are skipped.
    """
    document = coerce_mapping(raw)
    key = coerce_str(document.get("key"))
    if key is None:
        return None
    if not key.startswith("/"):
        key = f"/{key}"
    cover_id = coerce_str(document.get("cover_i"))
    link = f"{_SITE}{key}"
    return CandidateRecord(
        id=key,
        title=coerce_str(document.get("title")) or "",
        description="",
        authors=coerce_str_list(document.get("author_name")) or UNKNOWN_AUTHORS,
        published_date=coerce_str(document.get("first_publish_year")),
        thumbnail=_COVER_URL.format(cover_id=cover_id) if cover_id else None,
        preview_link=link,
        info_link=link,
        source_name=SOURCE_NAME,
        external_id=key,
    )


class OpenLibraryProvider(HttpSearchProvider):
    """Search the Open Library catalog; no credential is needed."""

    name = "openLibrary"
    source_name = SOURCE_NAME
    category = ProviderCategory.BOOK_CATALOG
    endpoint = f"{_SITE}/search.json"
    normalize = staticmethod(normalize)

    def build_params(self, query: str, max_results: int) -> dict[str, str | int]:
        return {"q": query, "limit": max_results}

    def extract_records(self, response: httpx.Response) -> list[object]:
        return coerce_records(json_payload(response).get("docs"))


__all__ = ("SOURCE_NAME", "OpenLibraryProvider", "normalize")
