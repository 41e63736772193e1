"""Resource library domain, ports, and services.

The catalog package holds the resource library's domain model, its ports,
and the services behind search, import, upload, and engagement. Persistence
adapters live in ``librarian.catalog.storage``.
"""

from .access import AccessLevelPolicy
from .aggregation import compose_response
from .candidates import CandidateRecord, ProviderCategory
from .domain import (
    AccessLevel,
    Caller,
    EngagementCounter,
    Rating,
    Resource,
    ResourceFilter,
    ResourceOrdering,
    ResourceSource,
    ResourceType,
    Role,
)
from .engagement import (
    DownloadTarget,
    RatingSummary,
    ShareNotice,
    ShareRequest,
    ShareResult,
    rate_resource,
    record_download,
    share_resource,
)
from .errors import (
    AccessDeniedError,
    CatalogError,
    InvalidCandidateError,
    InvalidRatingError,
    InvalidRequestError,
    InvalidResourceError,
    LocalStoreError,
    ProviderUnavailableError,
    ResourceNotFoundError,
    ShareRejectedError,
)
from .fanout import FanOutResult, fan_out
from .importing import ImportRequest, ImportResult, import_candidate
from .local_search import UnitOfWorkLocalSearch
from .notifications import LoggingShareNotifier
from .ports import (
    AccessPolicy,
    CatalogUnitOfWork,
    LocalResourceSearch,
    ResourceRepository,
    SearchProvider,
    ShareNotifier,
)
from .search import (
    LOCAL_SOURCE,
    LocalPage,
    Pagination,
    ProviderOutcome,
    SearchRequest,
    SearchResponse,
)
from .search_service import search_resources
from .selection import select_sources
from .services import (
    Highlights,
    ResourceDetail,
    StoredFile,
    UploadRequest,
    create_resource,
    get_resource_detail,
    list_highlights,
)

__all__ = (
    "LOCAL_SOURCE",
    "AccessDeniedError",
    "AccessLevel",
    "AccessLevelPolicy",
    "AccessPolicy",
    "Caller",
    "CandidateRecord",
    "CatalogError",
    "CatalogUnitOfWork",
    "DownloadTarget",
    "EngagementCounter",
    "FanOutResult",
    "Highlights",
    "ImportRequest",
    "ImportResult",
    "InvalidCandidateError",
    "InvalidRatingError",
    "InvalidRequestError",
    "InvalidResourceError",
    "LocalPage",
    "LocalResourceSearch",
    "LocalStoreError",
    "LoggingShareNotifier",
    "Pagination",
    "ProviderCategory",
    "ProviderOutcome",
    "ProviderUnavailableError",
    "Rating",
    "RatingSummary",
    "Resource",
    "ResourceDetail",
    "ResourceFilter",
    "ResourceNotFoundError",
    "ResourceOrdering",
    "ResourceRepository",
    "ResourceSource",
    "ResourceType",
    "Role",
    "SearchProvider",
    "SearchRequest",
    "SearchResponse",
    "ShareNotice",
    "ShareNotifier",
    "ShareRejectedError",
    "ShareRequest",
    "ShareResult",
    "StoredFile",
    "UnitOfWorkLocalSearch",
    "UploadRequest",
    "compose_response",
    "create_resource",
    "fan_out",
    "get_resource_detail",
    "import_candidate",
    "list_highlights",
    "rate_resource",
    "record_download",
    "search_resources",
    "select_sources",
    "share_resource",
)
