"""Search and import Falcon resources."""

from __future__ import annotations

import typing as typ

import falcon

from librarian.api.helpers import (
    parse_access_level,
    parse_candidate,
    parse_caller,
    parse_catalog_ids,
    parse_search_request,
)
from librarian.api.serializers import serialize_resource, serialize_search_response
from librarian.catalog.errors import InvalidCandidateError
from librarian.catalog.importing import ImportRequest, import_candidate
from librarian.catalog.search_service import search_resources

from .base import _LibraryResourceBase

if typ.TYPE_CHECKING:
    from librarian.api.types import JsonPayload
    from librarian.catalog.candidates import ProviderCategory


class ResourceSearchResource(_LibraryResourceBase):
    """Search local resources and external providers together."""

    async def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Run a search from query parameters.

        Parameters
        ----------
        req : falcon.Request
            Request carrying ``query``, ``type``, ``level``, ``department``,
            ``course``, ``sources``, ``page`` and ``limit`` parameters.
        resp : falcon.Response
            Response populated with the search envelope.
        """
        parse_caller(req)
        request = parse_search_request(req.params, self._context.settings)
        response = await search_resources(
            request,
            local_search=self._context.local_search,
            providers=self._context.providers,
            timeout=self._context.settings.provider_timeout,
            correlation_id=self._correlation_id(req),
        )
        resp.media = serialize_search_response(response)
        resp.status = falcon.HTTP_200


class ResourceImportResource(_LibraryResourceBase):
    """Import an external candidate into the library."""

    def _category_for(self, payload: JsonPayload) -> ProviderCategory:
        provider_name = payload.get("provider")
        provider = (
            self._context.providers.get(provider_name)
            if isinstance(provider_name, str)
            else None
        )
        if provider is None:
            msg = f"Unknown provider: {provider_name!r}."
            raise InvalidCandidateError(msg)
        return provider.category

    async def on_post(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Import the candidate in the request body.

        Responds ``201`` with the new resource, or ``200`` with the existing
        resource when the candidate was imported before.
        """
        caller = parse_caller(req)
        payload = await self._read_payload(req)
        department_ids, course_ids = parse_catalog_ids(payload)
        request = ImportRequest(
            candidate=parse_candidate(payload),
            category=self._category_for(payload),
            importer=caller,
            access_level=parse_access_level(payload),
            department_ids=department_ids,
            course_ids=course_ids,
        )
        async with self._context.uow_factory() as uow:
            result = await import_candidate(uow, request)

        resp.media = {
            "success": True,
            "created": result.created,
            "data": serialize_resource(result.resource),
        }
        resp.status = falcon.HTTP_201 if result.created else falcon.HTTP_200
