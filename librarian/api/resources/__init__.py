"""Falcon resources for the resource library endpoints.

Examples
--------
>>> app.add_route("/resources/search", ResourceSearchResource(context))
"""

from .library import (
    FeaturedResourcesResource,
    ResourceDetailResource,
    ResourceDownloadResource,
    ResourceRatingResource,
    ResourcesResource,
    ResourceShareResource,
)
from .search import ResourceImportResource, ResourceSearchResource

__all__ = [
    "FeaturedResourcesResource",
    "ResourceDetailResource",
    "ResourceDownloadResource",
    "ResourceImportResource",
    "ResourceRatingResource",
    "ResourceSearchResource",
    "ResourceShareResource",
    "ResourcesResource",
]
