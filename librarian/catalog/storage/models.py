"""SQLAlchemy ORM models for the resource library.

This module defines the ORM models and enumerations backing the resource
library schema. Repositories and Alembic migrations use them to describe the
database structure.

Examples
--------
Use the base metadata to create the library tables:

>>> from sqlalchemy import create_engine
>>> engine = create_engine("postgresql://example")
>>> Base.metadata.create_all(engine)
"""

from __future__ import annotations

# SQLAlchemy evaluates annotations at runtime; keep stdlib types imported.
import datetime as dt  # noqa: TC003
import uuid  # noqa: TC003

import sqlalchemy as sa
from sqlalchemy import orm
from sqlalchemy.dialects import postgresql

from librarian.catalog.domain import AccessLevel, ResourceType


class Base(orm.DeclarativeBase):
    """Base class for resource library models.

    Notes
    -----
    Alembic and test scaffolding rely on ``Base.metadata`` when applying
    migrations or creating schema definitions.
    """


RESOURCE_TYPE = sa.Enum(
    ResourceType,
    name="resource_type",
    values_callable=lambda enum_cls: [item.value for item in enum_cls],
)
ACCESS_LEVEL = sa.Enum(
    AccessLevel,
    name="access_level",
    values_callable=lambda enum_cls: [item.value for item in enum_cls],
)


class ResourceRecord(Base):
    """SQLAlchemy model for library resources.

    Attributes
    ----------
    id : uuid.UUID
        Primary key for the resource.
    title, description : str
        Display text.
    resource_type : ResourceType
        Resource kind.
    format : str
        Content format such as ``pdf`` or ``link``.
    tags : list[str]
        De-duplicated tags.
    department_ids, course_ids : list[uuid.UUID]
        Catalog associations.
    file_url, external_link : str | None
        Content location; at least one is set.
    access_level : AccessLevel
        Visibility level.
    views, downloads, shares : int
        Engagement counters, incremented in place.
    average_rating : float
        Mean score of the rows in ``resource_ratings``.
    source_name, source_external_id, source_url : str | None
        Import provenance; the name and external identifier pair is unique.
    created_at : datetime.datetime
        Timestamp when the record was created.
    updated_at : datetime.datetime
        Timestamp when the record was last updated.
    """

    __tablename__ = "resources"
    __table_args__ = (
        sa.Index(
            "uq_resources_source_external_id",
            "source_name",
            "source_external_id",
            unique=True,
            postgresql_where=sa.text("source_external_id IS NOT NULL"),
        ),
        sa.Index("ix_resources_approved_created", "is_approved", "created_at"),
    )

    id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        primary_key=True,
    )
    title: orm.Mapped[str] = orm.mapped_column(sa.String(500))
    description: orm.Mapped[str] = orm.mapped_column(sa.Text, default="")
    resource_type: orm.Mapped[ResourceType] = orm.mapped_column(RESOURCE_TYPE)
    format: orm.Mapped[str] = orm.mapped_column(sa.String(32))
    author: orm.Mapped[str | None] = orm.mapped_column(sa.String(500), nullable=True)
    publisher: orm.Mapped[str | None] = orm.mapped_column(
        sa.String(255),
        nullable=True,
    )
    publication_year: orm.Mapped[int | None] = orm.mapped_column(
        sa.Integer,
        nullable=True,
    )
    isbn: orm.Mapped[str | None] = orm.mapped_column(sa.String(32), nullable=True)
    language: orm.Mapped[str] = orm.mapped_column(sa.String(64), default="English")
    tags: orm.Mapped[list[str]] = orm.mapped_column(
        postgresql.ARRAY(sa.Text),
        default=list,
    )
    department_ids: orm.Mapped[list[uuid.UUID]] = orm.mapped_column(
        postgresql.ARRAY(postgresql.UUID(as_uuid=True)),
        default=list,
    )
    course_ids: orm.Mapped[list[uuid.UUID]] = orm.mapped_column(
        postgresql.ARRAY(postgresql.UUID(as_uuid=True)),
        default=list,
    )
    level: orm.Mapped[int | None] = orm.mapped_column(sa.Integer, nullable=True)
    file_url: orm.Mapped[str | None] = orm.mapped_column(sa.Text, nullable=True)
    external_link: orm.Mapped[str | None] = orm.mapped_column(sa.Text, nullable=True)
    thumbnail: orm.Mapped[str | None] = orm.mapped_column(sa.Text, nullable=True)
    uploaded_by: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
    )
    access_level: orm.Mapped[AccessLevel] = orm.mapped_column(ACCESS_LEVEL)
    is_approved: orm.Mapped[bool] = orm.mapped_column(sa.Boolean, default=False)
    is_featured: orm.Mapped[bool] = orm.mapped_column(sa.Boolean, default=False)
    views: orm.Mapped[int] = orm.mapped_column(sa.Integer, server_default="0")
    downloads: orm.Mapped[int] = orm.mapped_column(sa.Integer, server_default="0")
    shares: orm.Mapped[int] = orm.mapped_column(sa.Integer, server_default="0")
    average_rating: orm.Mapped[float] = orm.mapped_column(
        sa.Float,
        server_default="0",
    )
    source_name: orm.Mapped[str | None] = orm.mapped_column(
        sa.String(120),
        nullable=True,
    )
    source_external_id: orm.Mapped[str | None] = orm.mapped_column(
        sa.String(255),
        nullable=True,
    )
    source_url: orm.Mapped[str | None] = orm.mapped_column(sa.Text, nullable=True)
    created_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
    )
    updated_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        onupdate=sa.func.now(),
    )

    ratings: orm.Mapped[list[ResourceRatingRecord]] = orm.relationship(
        lazy="selectin",
        order_by="ResourceRatingRecord.rated_at",
        cascade="all, delete-orphan",
    )


class ResourceRatingRecord(Base):
    """SQLAlchemy model for resource ratings.

    One row per ``(resource_id, rater_id)`` pair; re-rating replaces the row.
    """

    __tablename__ = "resource_ratings"
    __table_args__ = (
        sa.CheckConstraint(
            "score BETWEEN 1 AND 5",
            name="ck_resource_ratings_score_range",
        ),
    )

    resource_id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("resources.id", ondelete="CASCADE"),
        primary_key=True,
    )
    rater_id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        primary_key=True,
    )
    score: orm.Mapped[int] = orm.mapped_column(sa.SmallInteger)
    review: orm.Mapped[str] = orm.mapped_column(sa.Text, default="")
    rated_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
    )
