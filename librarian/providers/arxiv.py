"""arXiv Atom export API provider.

The export API answers with an Atom feed; entries are parsed with
``defusedxml`` and read only through ``normalize``.
"""

from __future__ import annotations

import typing as typ
from xml.etree.ElementTree import Element  # noqa: S405

from defusedxml import ElementTree

from librarian.catalog.candidates import (
    UNKNOWN_AUTHORS,
    CandidateRecord,
    ProviderCategory,
)

from ._coercion import http_url
from .base import HttpSearchProvider

if typ.TYPE_CHECKING:
    import httpx

SOURCE_NAME = "arXiv"
_ATOM = "{http://www.w3.org/2005/Atom}"


def _text(entry: Element, tag: str) -> str | None:
    """Return whitespace-collapsed text of the first ``tag`` child."""
    node = entry.find(f"{_ATOM}{tag}")
    if node is None or not node.text:
        return None
    text = " ".join(node.text.split())
    return text or None


def _links(entry: Element) -> tuple[str | None, str | None]:
    """Return the ``(pdf, landing page)`` links of an entry."""
    pdf: str | None = None
    landing: str | None = None
    for link in entry.findall(f"{_ATOM}link"):
        href = http_url(link.get("href"))
        if href is None:
            continue
        if link.get("title") == "pdf" or link.get("type") == "application/pdf":
            pdf = pdf or href
        elif link.get("rel", "alternate") == "alternate":
            landing = landing or href
    return pdf, landing


def normalize(raw: object) -> CandidateRecord | None:
    """Map an Atom ``entry`` element to a candidate.

    The arXiv identifier is the last path segment of the entry ``id`` URL.
    Entries without an ``id`` are skipped.
    """
    if not isinstance(raw, Element):
        return None
    entry_url = _text(raw, "id")
    if entry_url is None:
        return None
    external_id = entry_url.rstrip("/").rsplit("/abs/", 1)[-1]
    authors = tuple(
        name
        for author in raw.findall(f"{_ATOM}author")
        if (name := _text(author, "name")) is not None
    )
    pdf, landing = _links(raw)
    landing = landing or http_url(entry_url)
    return CandidateRecord(
        id=external_id,
        title=_text(raw, "title") or "",
        description=_text(raw, "summary") or "",
        authors=authors or UNKNOWN_AUTHORS,
        published_date=_text(raw, "published"),
        thumbnail=None,
        preview_link=pdf or landing,
        info_link=landing,
        source_name=SOURCE_NAME,
        external_id=external_id,
    )


class ArxivProvider(HttpSearchProvider):
    """Search arXiv preprints; no credential is needed."""

    name = "arxiv"
    source_name = SOURCE_NAME
    category = ProviderCategory.PREPRINT
    endpoint = "https://export.arxiv.org/api/query"
    normalize = staticmethod(normalize)

    def build_params(self, query: str, max_results: int) -> dict[str, str | int]:
        return {
            "search_query": f"all:{query}",
            "start": 0,
            "max_results": max_results,
        }

    def extract_records(self, response: httpx.Response) -> list[object]:
        try:
            root = ElementTree.fromstring(response.content)
        except ElementTree.ParseError as exc:
            msg = "Invalid Atom feed."
            raise ValueError(msg) from exc
        return list(root.findall(f"{_ATOM}entry"))


__all__ = ("SOURCE_NAME", "ArxivProvider", "normalize")
