"""Falcon resources for uploads, resource detail, and engagement."""

from __future__ import annotations

import falcon

from librarian.api.helpers import (
    bounded_limit,
    parse_caller,
    parse_share_request,
    parse_upload_request,
    parse_uuid,
)
from librarian.api.serializers import (
    serialize_detail,
    serialize_download,
    serialize_highlights,
    serialize_rating_summary,
    serialize_resource,
    serialize_share,
)
from librarian.catalog.domain import ResourceType
from librarian.catalog.engagement import (
    rate_resource,
    record_download,
    share_resource,
)
from librarian.catalog.services import (
    DEFAULT_HIGHLIGHT_LIMIT,
    create_resource,
    get_resource_detail,
    list_highlights,
)

from .base import _LibraryResourceBase


class ResourcesResource(_LibraryResourceBase):
    """Register uploaded resources."""

    async def on_post(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Register a resource whose file, if any, is already stored."""
        caller = parse_caller(req)
        request = parse_upload_request(await self._read_payload(req))
        async with self._context.uow_factory() as uow:
            resource = await create_resource(uow, caller, request)

        resp.media = {"success": True, "data": serialize_resource(resource)}
        resp.status = falcon.HTTP_201


class FeaturedResourcesResource(_LibraryResourceBase):
    """Curated featured, trending, recent and top-rated lists."""

    async def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Return the curated lists, optionally filtered by ``type``."""
        parse_caller(req)
        limit = bounded_limit(
            req.params.get("limit"),
            default=DEFAULT_HIGHLIGHT_LIMIT,
            maximum=self._context.settings.max_limit,
        )
        raw_type = req.get_param("type")
        try:
            resource_type = ResourceType(raw_type.lower()) if raw_type else None
        except ValueError as exc:
            msg = f"Invalid type: {raw_type!r}."
            raise falcon.HTTPBadRequest(description=msg) from exc
        async with self._context.uow_factory() as uow:
            highlights = await list_highlights(
                uow, limit=limit, resource_type=resource_type
            )

        resp.media = {"success": True, "data": serialize_highlights(highlights)}
        resp.status = falcon.HTTP_200


class ResourceDetailResource(_LibraryResourceBase):
    """Resource detail; each read counts as a view."""

    async def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        resource_id: str,
    ) -> None:
        """Return the resource, the caller's rating and related resources."""
        caller = parse_caller(req)
        parsed_id = parse_uuid(resource_id, "resource_id")
        async with self._context.uow_factory() as uow:
            detail = await get_resource_detail(
                uow, parsed_id, caller, self._context.access_policy
            )

        resp.media = {"success": True, "data": serialize_detail(detail)}
        resp.status = falcon.HTTP_200


class ResourceRatingResource(_LibraryResourceBase):
    """Rate a resource."""

    async def on_post(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        resource_id: str,
    ) -> None:
        """Insert or replace the caller's rating.

        The body carries ``score`` (1 to 5) and an optional ``review``.
        """
        caller = parse_caller(req)
        parsed_id = parse_uuid(resource_id, "resource_id")
        payload = await self._read_payload(req)
        review = payload.get("review")
        if review is not None and not isinstance(review, str):
            msg = "Field review must be a string."
            raise falcon.HTTPBadRequest(description=msg)
        async with self._context.uow_factory() as uow:
            summary = await rate_resource(
                uow, parsed_id, caller, payload.get("score"), review
            )

        resp.media = {"success": True, "data": serialize_rating_summary(summary)}
        resp.status = falcon.HTTP_200


class ResourceDownloadResource(_LibraryResourceBase):
    """Count a download and return where to fetch the content."""

    async def on_post(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        resource_id: str,
    ) -> None:
        """Return ``redirect_url`` for links or ``file_url`` for stored files."""
        caller = parse_caller(req)
        parsed_id = parse_uuid(resource_id, "resource_id")
        async with self._context.uow_factory() as uow:
            target = await record_download(
                uow, parsed_id, caller, self._context.access_policy
            )

        resp.media = {"success": True, "data": serialize_download(target)}
        resp.status = falcon.HTTP_200


class ResourceShareResource(_LibraryResourceBase):
    """Share a resource with a study group or users."""

    async def on_post(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        resource_id: str,
    ) -> None:
        """Deliver a share notice and count the share."""
        caller = parse_caller(req)
        parsed_id = parse_uuid(resource_id, "resource_id")
        request = parse_share_request(await self._read_payload(req))
        async with self._context.uow_factory() as uow:
            result = await share_resource(
                uow, self._context.notifier, parsed_id, caller, request
            )

        resp.media = {"success": True, "data": serialize_share(result)}
        resp.status = falcon.HTTP_200
