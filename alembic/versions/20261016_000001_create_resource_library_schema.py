"""Create the resource library schema.

This migration defines the ``resources`` and ``resource_ratings`` tables, the
resource enums, and the partial unique index that keeps imports of the same
external record from producing duplicate resources.

Examples
--------
Apply the migration with Alembic:

>>> alembic upgrade head
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision = "20261016_000001"
down_revision = None
branch_labels = None
depends_on = None


def _resource_type_enum() -> postgresql.ENUM:
    return postgresql.ENUM(
        "document",
        "link",
        "video",
        "image",
        "other",
        name="resource_type",
        create_type=False,
    )


def _access_level_enum() -> postgresql.ENUM:
    return postgresql.ENUM(
        "public",
        "department",
        "course",
        "private",
        name="access_level",
        create_type=False,
    )


def _timestamp_columns() -> list[sa.Column]:
    """Create shared created_at and updated_at columns."""
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def _counter_column(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=False, server_default="0")


def _create_resources_table(
    resource_type: postgresql.ENUM,
    access_level: postgresql.ENUM,
) -> None:
    """Create the resources table and its indexes."""
    op.create_table(
        "resources",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("resource_type", resource_type, nullable=False),
        sa.Column("format", sa.String(32), nullable=False),
        sa.Column("author", sa.String(500), nullable=True),
        sa.Column("publisher", sa.String(255), nullable=True),
        sa.Column("publication_year", sa.Integer(), nullable=True),
        sa.Column("isbn", sa.String(32), nullable=True),
        sa.Column("language", sa.String(64), nullable=False),
        sa.Column("tags", postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column(
            "department_ids",
            postgresql.ARRAY(postgresql.UUID(as_uuid=True)),
            nullable=False,
        ),
        sa.Column(
            "course_ids",
            postgresql.ARRAY(postgresql.UUID(as_uuid=True)),
            nullable=False,
        ),
        sa.Column("level", sa.Integer(), nullable=True),
        sa.Column("file_url", sa.Text(), nullable=True),
        sa.Column("external_link", sa.Text(), nullable=True),
        sa.Column("thumbnail", sa.Text(), nullable=True),
        sa.Column("uploaded_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("access_level", access_level, nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        _counter_column("views"),
        _counter_column("downloads"),
        _counter_column("shares"),
        sa.Column(
            "average_rating",
            sa.Float(),
            nullable=False,
            server_default="0",
        ),
        sa.Column("source_name", sa.String(120), nullable=True),
        sa.Column("source_external_id", sa.String(255), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        *_timestamp_columns(),
    )
    op.create_index(
        "uq_resources_source_external_id",
        "resources",
        ["source_name", "source_external_id"],
        unique=True,
        postgresql_where=sa.text("source_external_id IS NOT NULL"),
    )
    op.create_index(
        "ix_resources_approved_created",
        "resources",
        ["is_approved", "created_at"],
    )


def _create_resource_ratings_table() -> None:
    """Create the resource_ratings table."""
    op.create_table(
        "resource_ratings",
        sa.Column(
            "resource_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("resources.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("rater_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("score", sa.SmallInteger(), nullable=False),
        sa.Column("review", sa.Text(), nullable=False),
        sa.Column(
            "rated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "score BETWEEN 1 AND 5",
            name="ck_resource_ratings_score_range",
        ),
    )


def upgrade() -> None:
    """Apply schema changes."""
    resource_type = _resource_type_enum()
    access_level = _access_level_enum()

    bind = op.get_bind()
    resource_type.create(bind, checkfirst=True)
    access_level.create(bind, checkfirst=True)

    _create_resources_table(resource_type, access_level)
    _create_resource_ratings_table()


def downgrade() -> None:
    """Revert schema changes."""
    op.drop_table("resource_ratings")
    op.drop_index("ix_resources_approved_created", table_name="resources")
    op.drop_index("uq_resources_source_external_id", table_name="resources")
    op.drop_table("resources")

    bind = op.get_bind()
    _access_level_enum().drop(bind, checkfirst=True)
    _resource_type_enum().drop(bind, checkfirst=True)
