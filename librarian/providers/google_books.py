"""Google Books volumes API provider."""

from __future__ import annotations

import typing as typ

from librarian.catalog.candidates import (
    UNKNOWN_AUTHORS,
    CandidateRecord,
    ProviderCategory,
)

from ._coercion import (
    coerce_mapping,
    coerce_records,
    coerce_str,
    coerce_str_list,
    http_url,
)
from .base import HttpSearchProvider, json_payload

if typ.TYPE_CHECKING:
    import httpx

SOURCE_NAME = "Google Books"
# The volumes API rejects maxResults above 40.
_MAX_PAGE_SIZE = 40


def normalize(raw: object) -> CandidateRecord | None:
    """Map a Google Books volume to a candidate.

    Volumes without an ``id`` are skipped.
    """
    volume = coerce_mapping(raw)
    volume_id = coerce_str(volume.get("id"))
    if volume_id is None:
        return None
    info = coerce_mapping(volume.get("volumeInfo"))
    image_links = coerce_mapping(info.get("imageLinks"))
    return CandidateRecord(
        id=volume_id,
        title=coerce_str(info.get("title")) or "",
        description=coerce_str(info.get("description")) or "",
        authors=coerce_str_list(info.get("authors")) or UNKNOWN_AUTHORS,
        published_date=coerce_str(info.get("publishedDate")),
        thumbnail=http_url(image_links.get("thumbnail")),
        preview_link=http_url(info.get("previewLink")),
        info_link=http_url(info.get("infoLink")),
        source_name=SOURCE_NAME,
        external_id=volume_id,
    )


class GoogleBooksProvider(HttpSearchProvider):
    """Search the Google Books volumes API; the API key is optional."""

    name = "googleBooks"
    source_name = SOURCE_NAME
    category = ProviderCategory.BOOK_CATALOG
    endpoint = "https://www.googleapis.com/books/v1/volumes"
    normalize = staticmethod(normalize)

    def build_params(self, query: str, max_results: int) -> dict[str, str | int]:
        params: dict[str, str | int] = {
            "q": query,
            "maxResults": min(max_results, _MAX_PAGE_SIZE),
        }
        if self._credential:
            params["key"] = self._credential
        return params

    def extract_records(self, response: httpx.Response) -> list[object]:
        return coerce_records(json_payload(response).get("items"))


__all__ = ("SOURCE_NAME", "GoogleBooksProvider", "normalize")
