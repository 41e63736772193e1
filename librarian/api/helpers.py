"""Request parsing helpers for the Falcon resource library adapter.

Helpers translate query strings, headers, and JSON bodies into the catalog's
typed request objects. Shape errors (wrong JSON types, malformed UUIDs or
integers) raise ``falcon.HTTPBadRequest``; content rules stay in the catalog
services.

Examples
--------
>>> caller = parse_caller(req)
>>> request = parse_search_request(req.params, settings)
"""

from __future__ import annotations

import typing as typ
import uuid

import falcon

from librarian.catalog.candidates import UNKNOWN_AUTHORS, CandidateRecord
from librarian.catalog.domain import (
    RESOURCE_LEVELS,
    AccessLevel,
    Caller,
    ResourceType,
    Role,
)
from librarian.catalog.engagement import ShareRequest
from librarian.catalog.errors import InvalidResourceError
from librarian.catalog.search import SearchRequest
from librarian.catalog.services import StoredFile, UploadRequest

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import enum

    from librarian.settings import Settings

    from .types import JsonPayload

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
USER_DEPARTMENTS_HEADER = "X-User-Departments"
USER_COURSES_HEADER = "X-User-Courses"


def parse_uuid(raw_value: object, field_name: str) -> uuid.UUID:
    """Parse a UUID string for a named request field.

    Raises
    ------
    falcon.HTTPBadRequest
        Raised when ``raw_value`` cannot be parsed as a UUID.
    """
    try:
        return uuid.UUID(typ.cast("str", raw_value))
    except (TypeError, ValueError, AttributeError) as exc:
        msg = f"Invalid UUID for {field_name}: {raw_value!r}."
        raise falcon.HTTPBadRequest(description=msg) from exc


def require_payload_dict(payload: object) -> JsonPayload:
    """Validate that request media is a JSON object mapping.

    Raises
    ------
    falcon.HTTPBadRequest
        Raised when request media is not a JSON object.
    """
    if not isinstance(payload, dict):
        msg = "JSON object payload is required."
        raise falcon.HTTPBadRequest(description=msg)
    return typ.cast("JsonPayload", payload)


def _optional_str(payload: cabc.Mapping[str, object], field_name: str) -> str | None:
    """Return a string field, ``None`` when absent, or raise HTTP 400."""
    value = payload.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"Field {field_name} must be a string."
        raise falcon.HTTPBadRequest(description=msg)
    return value.strip() or None


def _optional_int(raw_value: object, field_name: str) -> int | None:
    """Parse an optional integer from a query value or JSON number."""
    if raw_value is None or raw_value == "":
        return None
    if isinstance(raw_value, bool):
        msg = f"Field {field_name} must be an integer."
        raise falcon.HTTPBadRequest(description=msg)
    try:
        return int(typ.cast("str | int", raw_value))
    except (TypeError, ValueError) as exc:
        msg = f"Field {field_name} must be an integer."
        raise falcon.HTTPBadRequest(description=msg) from exc


def _parse_enum[EnumT: enum.StrEnum](
    enum_type: type[EnumT],
    raw_value: object,
    field_name: str,
) -> EnumT:
    try:
        return enum_type(typ.cast("str", raw_value).strip().lower())
    except (AttributeError, ValueError) as exc:
        allowed = ", ".join(member.value for member in enum_type)
        msg = f"Invalid {field_name}: {raw_value!r}. Expected one of: {allowed}."
        raise falcon.HTTPBadRequest(description=msg) from exc


def _uuid_list(raw_value: object, field_name: str) -> tuple[uuid.UUID, ...]:
    """Parse a JSON list or comma-separated string of UUIDs."""
    if raw_value is None or raw_value == "":
        return ()
    if isinstance(raw_value, str):
        items: list[object] = [item for item in raw_value.split(",") if item.strip()]
    elif isinstance(raw_value, list):
        items = raw_value
    else:
        msg = f"Field {field_name} must be a list of UUIDs."
        raise falcon.HTTPBadRequest(description=msg)
    parsed = (
        parse_uuid(item.strip() if isinstance(item, str) else item, field_name)
        for item in items
    )
    return tuple(dict.fromkeys(parsed))


def parse_caller(req: falcon.Request) -> Caller:
    """Build the caller identity from gateway headers.

    Raises
    ------
    falcon.HTTPUnauthorized
        Raised when the identity headers are missing or invalid.
    """
    raw_id = req.get_header(USER_ID_HEADER)
    raw_role = req.get_header(USER_ROLE_HEADER)
    if not raw_id or not raw_role:
        msg = "Caller identity headers are required."
        raise falcon.HTTPUnauthorized(description=msg)
    try:
        caller_id = uuid.UUID(raw_id)
        role = Role(raw_role.strip().lower())
    except ValueError as exc:
        msg = "Caller identity headers are invalid."
        raise falcon.HTTPUnauthorized(description=msg) from exc
    return Caller(
        id=caller_id,
        role=role,
        department_ids=frozenset(
            _uuid_list(req.get_header(USER_DEPARTMENTS_HEADER), "departments")
        ),
        course_ids=frozenset(
            _uuid_list(req.get_header(USER_COURSES_HEADER), "courses")
        ),
    )


def bounded_limit(raw_value: object, *, default: int, maximum: int) -> int:
    """Parse a page size and clamp it to ``1..maximum``."""
    limit = _optional_int(raw_value, "limit")
    if limit is None:
        return default
    return max(1, min(limit, maximum))


def parse_search_request(
    params: cabc.Mapping[str, object],
    settings: Settings,
) -> SearchRequest:
    """Build a search request from query parameters.

    Parameters
    ----------
    params : collections.abc.Mapping[str, object]
        Falcon query parameters.
    settings : Settings
        Runtime settings supplying the default and maximum page size.

    Returns
    -------
    SearchRequest
        Request with a blank query treated as absent, ``limit`` clamped to
        ``1..max_limit`` and ``page`` of at least 1.

    Raises
    ------
    falcon.HTTPBadRequest
        Raised when a parameter is malformed.
    """
    query = _optional_str(params, "query")
    raw_type = params.get("type")
    raw_department = params.get("department")
    raw_course = params.get("course")
    raw_sources = _optional_str(params, "sources")
    level = _optional_int(params.get("level"), "level")
    if level is not None and level not in RESOURCE_LEVELS:
        msg = f"Unsupported level: {level}."
        raise falcon.HTTPBadRequest(description=msg)
    page = _optional_int(params.get("page"), "page") or 1
    sources = (
        tuple(name.strip() for name in raw_sources.split(",") if name.strip())
        if raw_sources
        else ()
    )
    return SearchRequest(
        query=query,
        resource_type=(
            _parse_enum(ResourceType, raw_type, "type") if raw_type else None
        ),
        level=level,
        department_id=(
            parse_uuid(raw_department, "department") if raw_department else None
        ),
        course_id=parse_uuid(raw_course, "course") if raw_course else None,
        sources=sources or None,
        page=max(page, 1),
        limit=bounded_limit(
            params.get("limit"),
            default=settings.default_limit,
            maximum=settings.max_limit,
        ),
    )


def parse_candidate(payload: JsonPayload) -> CandidateRecord:
    """Build a candidate record from an import payload's ``candidate`` object."""
    candidate = require_payload_dict(payload.get("candidate"))
    raw_authors = candidate.get("authors")
    if raw_authors is not None and not isinstance(raw_authors, list):
        msg = "Field authors must be a list of strings."
        raise falcon.HTTPBadRequest(description=msg)
    authors = tuple(
        str(author).strip() for author in raw_authors or () if str(author).strip()
    )
    external_id = _optional_str(candidate, "external_id") or _optional_str(
        candidate, "id"
    )
    return CandidateRecord(
        id=external_id or "",
        title=_optional_str(candidate, "title") or "",
        description=_optional_str(candidate, "description") or "",
        authors=authors or UNKNOWN_AUTHORS,
        published_date=_optional_str(candidate, "published_date"),
        thumbnail=_optional_str(candidate, "thumbnail"),
        preview_link=_optional_str(candidate, "preview_link"),
        info_link=_optional_str(candidate, "info_link"),
        source_name=_optional_str(candidate, "source_name") or "",
        external_id=external_id or "",
    )


def parse_access_level(payload: JsonPayload) -> AccessLevel:
    """Return the payload's access level, defaulting to public."""
    raw_value = payload.get("access_level")
    if raw_value is None:
        return AccessLevel.PUBLIC
    return _parse_enum(AccessLevel, raw_value, "access_level")


def parse_catalog_ids(
    payload: JsonPayload,
) -> tuple[tuple[uuid.UUID, ...], tuple[uuid.UUID, ...]]:
    """Return ``(department_ids, course_ids)`` from a payload."""
    return (
        _uuid_list(payload.get("department_ids"), "department_ids"),
        _uuid_list(payload.get("course_ids"), "course_ids"),
    )


def _parse_tags(raw_value: object) -> tuple[str, ...]:
    if raw_value is None:
        return ()
    if isinstance(raw_value, str):
        return tuple(raw_value.split(","))
    if isinstance(raw_value, list) and all(isinstance(tag, str) for tag in raw_value):
        return tuple(raw_value)
    msg = "Field tags must be a list of strings or a comma-separated string."
    raise falcon.HTTPBadRequest(description=msg)


def _parse_stored_file(raw_value: object) -> StoredFile | None:
    if raw_value is None:
        return None
    stored = require_payload_dict(raw_value)
    filename = _optional_str(stored, "filename")
    file_url = _optional_str(stored, "file_url")
    if filename is None or file_url is None:
        msg = "Field file requires filename and file_url."
        raise falcon.HTTPBadRequest(description=msg)
    return StoredFile(
        filename=filename,
        file_url=file_url,
        mime_type=_optional_str(stored, "mime_type"),
        size=_optional_int(stored.get("size"), "size"),
    )


def parse_upload_request(payload: JsonPayload) -> UploadRequest:
    """Build an upload request from a JSON payload.

    Raises
    ------
    InvalidResourceError
        Raised when the title or resource type is missing.
    falcon.HTTPBadRequest
        Raised when a field is malformed.
    """
    title = _optional_str(payload, "title")
    raw_type = payload.get("resource_type")
    if title is None or raw_type is None:
        msg = "Please provide title and resource type."
        raise InvalidResourceError(msg)
    department_ids, course_ids = parse_catalog_ids(payload)
    return UploadRequest(
        title=title,
        resource_type=_parse_enum(ResourceType, raw_type, "resource_type"),
        description=_optional_str(payload, "description") or "",
        file=_parse_stored_file(payload.get("file")),
        external_link=_optional_str(payload, "external_link"),
        author=_optional_str(payload, "author"),
        publisher=_optional_str(payload, "publisher"),
        isbn=_optional_str(payload, "isbn"),
        publication_year=_optional_int(
            payload.get("publication_year"), "publication_year"
        ),
        tags=_parse_tags(payload.get("tags")),
        department_ids=department_ids,
        course_ids=course_ids,
        level=_optional_int(payload.get("level"), "level"),
        access_level=parse_access_level(payload),
        language=_optional_str(payload, "language") or "English",
        thumbnail=_optional_str(payload, "thumbnail"),
    )


def parse_share_request(payload: JsonPayload) -> ShareRequest:
    """Build a share request from a JSON payload."""
    raw_group = payload.get("group_id")
    return ShareRequest(
        group_id=parse_uuid(raw_group, "group_id") if raw_group else None,
        user_ids=_uuid_list(payload.get("user_ids"), "user_ids"),
        message=_optional_str(payload, "message"),
    )


__all__ = (
    "USER_COURSES_HEADER",
    "USER_DEPARTMENTS_HEADER",
    "USER_ID_HEADER",
    "USER_ROLE_HEADER",
    "bounded_limit",
    "parse_access_level",
    "parse_candidate",
    "parse_caller",
    "parse_catalog_ids",
    "parse_search_request",
    "parse_share_request",
    "parse_upload_request",
    "parse_uuid",
    "require_payload_dict",
)
