"""Exception hierarchy for resource library services.

Every service-level failure derives from ``CatalogError`` so adapters can map
errors to transport responses from the structured ``code`` and ``retryable``
fields instead of matching on messages.
"""

from __future__ import annotations

import typing as typ


class CatalogError(Exception):
    """Base exception with structured metadata for catalog services."""

    error_code: typ.ClassVar[str] = "catalog_error"
    default_retryable: typ.ClassVar[bool] = False

    code: str
    entity_id: str | None
    retryable: bool

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        entity_id: str | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else type(self).error_code
        self.entity_id = entity_id
        self.retryable = (
            type(self).default_retryable if retryable is None else retryable
        )


class InvalidRequestError(CatalogError):
    """Raised when a search request carries no searchable criteria."""

    error_code: typ.ClassVar[str] = "invalid_request"


class InvalidCandidateError(CatalogError):
    """Raised when an external candidate cannot become a local resource."""

    error_code: typ.ClassVar[str] = "invalid_candidate"


class InvalidResourceError(CatalogError):
    """Raised when an uploaded resource violates resource invariants."""

    error_code: typ.ClassVar[str] = "invalid_resource"


class InvalidRatingError(CatalogError):
    """Raised when a rating score falls outside the accepted range."""

    error_code: typ.ClassVar[str] = "invalid_rating"


class ResourceNotFoundError(CatalogError):
    """Raised when a resource identifier does not exist."""

    error_code: typ.ClassVar[str] = "resource_not_found"


class AccessDeniedError(CatalogError):
    """Raised when the access policy refuses a caller."""

    error_code: typ.ClassVar[str] = "access_denied"


class ShareRejectedError(CatalogError):
    """Raised by share notifiers that refuse a share notice."""

    error_code: typ.ClassVar[str] = "share_rejected"


class ProviderUnavailableError(CatalogError):
    """Raised inside a provider adapter when its upstream cannot answer.

    Provider adapters recover from this error themselves; it never reaches a
    search caller.
    """

    error_code: typ.ClassVar[str] = "provider_unavailable"
    default_retryable: typ.ClassVar[bool] = True


class LocalStoreError(CatalogError):
    """Raised when the local resource store fails during a search."""

    error_code: typ.ClassVar[str] = "local_store_failure"
    default_retryable: typ.ClassVar[bool] = True


__all__ = (
    "AccessDeniedError",
    "CatalogError",
    "InvalidCandidateError",
    "InvalidRatingError",
    "InvalidRequestError",
    "InvalidResourceError",
    "LocalStoreError",
    "ProviderUnavailableError",
    "ResourceNotFoundError",
    "ShareRejectedError",
)
