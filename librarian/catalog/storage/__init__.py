"""SQLAlchemy persistence adapters for the resource library.

This package provides the SQLAlchemy models, repository, and unit-of-work
used by the catalog services, keeping persistence logic out of the domain
layer.

Examples
--------
Use the unit-of-work to fetch a resource:

>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     resource = await uow.resources.get(resource_id)
"""

from .alembic_helpers import apply_migrations
from .models import Base, ResourceRatingRecord, ResourceRecord
from .repositories import SqlAlchemyResourceRepository
from .uow import SqlAlchemyUnitOfWork

__all__ = (
    "Base",
    "ResourceRatingRecord",
    "ResourceRecord",
    "SqlAlchemyResourceRepository",
    "SqlAlchemyUnitOfWork",
    "apply_migrations",
)
