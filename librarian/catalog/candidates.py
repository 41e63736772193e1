"""Canonical candidate records produced by external provider adapters.

Provider payloads differ in shape; each provider module maps its native
records into ``CandidateRecord`` so that the aggregator, the HTTP serializers,
and the import service only ever see one form.
"""

from __future__ import annotations

import dataclasses as dc
import enum

#: Author list used when a provider record names nobody.
UNKNOWN_AUTHORS: tuple[str, ...] = ("Unknown",)


class ProviderCategory(enum.StrEnum):
    """Kinds of external provider, used to type imported resources."""

    BOOK_CATALOG = "book_catalog"
    OPEN_ACCESS = "open_access"
    PREPRINT = "preprint"


@dc.dataclass(frozen=True, slots=True)
class CandidateRecord:
    """External search result in canonical form.

    Attributes
    ----------
    id : str
        Provider-scoped identifier, equal to ``external_id``.
    title : str
        Display title; empty when the provider omitted it.
    description : str
        Abstract or description; empty when absent.
    authors : tuple[str, ...]
        Author names, ``("Unknown",)`` when the provider names nobody.
    published_date : str | None
        Provider-formatted publication date.
    thumbnail : str | None
        Cover or preview image URL.
    preview_link : str | None
        URL of a readable preview or full text.
    info_link : str | None
        URL of the provider's landing page.
    source_name : str
        Human-readable provider name such as ``"Google Books"``.
    external_id : str
        Identifier of the record at the provider.
    """

    id: str
    title: str
    description: str
    authors: tuple[str, ...]
    published_date: str | None
    thumbnail: str | None
    preview_link: str | None
    info_link: str | None
    source_name: str
    external_id: str


__all__ = ("UNKNOWN_AUTHORS", "CandidateRecord", "ProviderCategory")
