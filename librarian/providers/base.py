"""Shared HTTP plumbing for external bibliographic providers.

``HttpSearchProvider`` performs one GET request per search on a shared
``httpx.AsyncClient``, hands the response to the subclass for parsing, and
passes every native record through the provider module's ``normalize``
function. Ordinary failures (transport errors, HTTP error statuses,
malformed payloads) never escape: they are logged and settle as an empty,
failed ``ProviderOutcome``. A provider whose required credential is missing
is disabled rather than failed and settles as an empty outcome.

Examples
--------
>>> async with httpx.AsyncClient() as client:
...     provider = OpenLibraryProvider(client)
...     candidates = await provider.search("networks", 5)
"""

from __future__ import annotations

import abc
import time
import typing as typ

import httpx

from librarian.catalog.errors import ProviderUnavailableError
from librarian.catalog.search import ProviderOutcome
from librarian.logging import get_logger, log_debug, log_info, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from librarian.catalog.candidates import CandidateRecord, ProviderCategory

logger = get_logger(__name__)


class HttpSearchProvider(abc.ABC):
    """Base class for providers reached over HTTP.

    Subclasses set the class attributes and implement ``build_params``,
    ``extract_records`` and ``normalize``.

    Attributes
    ----------
    name : str
        Source name used in requests and response envelopes.
    source_name : str
        Human-readable provider name stamped on candidates.
    category : ProviderCategory
        Provider kind, used to type imported resources.
    endpoint : str
        Search URL.
    requires_credential : bool
        Whether searches are skipped when no credential is configured.
    """

    name: typ.ClassVar[str]
    source_name: typ.ClassVar[str]
    category: typ.ClassVar[ProviderCategory]
    endpoint: typ.ClassVar[str]
    requires_credential: typ.ClassVar[bool] = False

    def __init__(
        self,
        client: httpx.AsyncClient,
        credential: str | None = None,
    ) -> None:
        self._client = client
        self._credential = credential

    @property
    def enabled(self) -> bool:
        """Return whether the provider can run with its configuration."""
        return bool(self._credential) or not self.requires_credential

    @abc.abstractmethod
    def build_params(self, query: str, max_results: int) -> dict[str, str | int]:
        """Return query-string parameters for a search."""

    def build_headers(self) -> dict[str, str]:
        """Return request headers for a search."""
        return {}

    @abc.abstractmethod
    def extract_records(self, response: httpx.Response) -> list[object]:
        """Return the native records contained in ``response``.

        Raises
        ------
        ValueError
            If the payload cannot be parsed.
        """

    @staticmethod
    @abc.abstractmethod
    def normalize(raw: object) -> CandidateRecord | None:
        """Map one native record to a candidate, or ``None`` to skip it."""

    async def _fetch(self, query: str, max_results: int) -> list[CandidateRecord]:
        """Run the HTTP request and normalize the payload.

        Raises
        ------
        ProviderUnavailableError
            If the request fails or the payload is malformed.
        """
        try:
            response = await self._client.get(
                self.endpoint,
                params=self.build_params(query, max_results),
                headers=self.build_headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"{self.name} responded with HTTP {exc.response.status_code}"
            raise ProviderUnavailableError(msg, entity_id=self.name) from exc
        except httpx.HTTPError as exc:
            msg = f"{self.name} request failed: {type(exc).__name__}"
            raise ProviderUnavailableError(msg, entity_id=self.name) from exc

        try:
            records = self.extract_records(response)
        except ValueError as exc:
            msg = f"{self.name} returned a malformed payload"
            raise ProviderUnavailableError(msg, entity_id=self.name) from exc

        candidates: list[CandidateRecord] = []
        skipped = 0
        for raw in records:
            candidate = self.normalize(raw)
            if candidate is None:
                skipped += 1
                continue
            candidates.append(candidate)
            if len(candidates) >= max_results:
                break
        if skipped:
            log_debug(
                logger, "Provider %s skipped %d unusable records.", self.name, skipped
            )
        return candidates

    async def search_outcome(self, query: str, max_results: int) -> ProviderOutcome:
        """Search and settle the result as a ``ProviderOutcome``.

        A provider whose required credential is missing is disabled: it
        returns an empty, non-failed outcome without any network I/O.
        """
        if not self.enabled:
            log_info(
                logger, "Provider %s skipped: credential not configured.", self.name
            )
            return ProviderOutcome(name=self.name)

        started = time.perf_counter()
        try:
            candidates = await self._fetch(query, max_results)
        except ProviderUnavailableError as exc:
            log_warning(
                logger,
                "Provider %s unavailable after %.3fs: %s",
                self.name,
                time.perf_counter() - started,
                exc,
            )
            return ProviderOutcome(name=self.name, failed=True, reason=str(exc))

        log_info(
            logger,
            "Provider %s returned %d candidates in %.3fs.",
            self.name,
            len(candidates),
            time.perf_counter() - started,
        )
        return ProviderOutcome(name=self.name, candidates=tuple(candidates))

    async def search(self, query: str, max_results: int) -> list[CandidateRecord]:
        """Search the provider, resolving failures to an empty list."""
        outcome = await self.search_outcome(query, max_results)
        return list(outcome.candidates)


def json_payload(response: httpx.Response) -> cabc.Mapping[str, typ.Any]:
    """Decode a JSON object body.

    Raises
    ------
    ValueError
        If the body is not a JSON object.
    """
    payload = response.json()
    if not isinstance(payload, dict):
        msg = "Expected a JSON object payload."
        raise ValueError(msg)  # noqa: TRY004
    return payload


__all__ = ("HttpSearchProvider", "json_payload")
