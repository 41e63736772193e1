"""Shared base for resource library Falcon resources."""

from __future__ import annotations

import typing as typ
import uuid

from librarian.api.helpers import require_payload_dict

if typ.TYPE_CHECKING:
    import falcon

    from librarian.api.types import JsonPayload, LibraryContext

REQUEST_ID_HEADER = "X-Request-Id"


class _LibraryResourceBase:
    """Store the shared library context for a route adapter."""

    def __init__(self, context: LibraryContext) -> None:
        self._context = context

    @staticmethod
    async def _read_payload(req: falcon.Request) -> JsonPayload:
        """Return the request body as a JSON object or raise HTTP 400."""
        return require_payload_dict(await req.get_media())

    @staticmethod
    def _correlation_id(req: falcon.Request) -> str:
        """Return the caller-supplied request id or a fresh one."""
        return req.get_header(REQUEST_ID_HEADER) or uuid.uuid4().hex
