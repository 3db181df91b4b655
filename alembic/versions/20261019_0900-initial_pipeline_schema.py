"""Create content items, credentials and provider asset cache.

Revision ID: initial_schema_001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "initial_schema_001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    """Create the three core tables."""
    op.create_table(
        "content_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("channel_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("stage", sa.String(50), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=True),
        sa.Column("scheduled_publish_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("audio_asset", sa.String(500), nullable=True),
        sa.Column("image_assets", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("rendered_video", sa.String(500), nullable=True),
        sa.Column("has_captions", sa.Boolean(), nullable=False),
        sa.Column("production_mode", sa.String(20), nullable=False),
        sa.Column("footage_refs", postgresql.ARRAY(sa.String()), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_content_items")),
    )
    op.create_index(
        op.f("ix_content_items_channel_id"), "content_items", ["channel_id"], unique=False
    )
    op.create_index(op.f("ix_content_items_stage"), "content_items", ["stage"], unique=False)
    op.create_index(
        "idx_content_item_channel_stage", "content_items", ["channel_id", "stage"], unique=False
    )

    op.create_table(
        "credentials",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("api_key", sa.String(500), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_credentials")),
        sa.UniqueConstraint("provider", name=op.f("uq_credentials_provider")),
    )

    op.create_table(
        "provider_assets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("native_id", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("language", sa.String(100), nullable=False),
        sa.Column("gender", sa.String(100), nullable=False),
        sa.Column("preview_url", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("extras", postgresql.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_provider_assets")),
        sa.UniqueConstraint(
            "provider", "native_id", name="uq_provider_assets_provider_native_id"
        ),
    )
    op.create_index(
        op.f("ix_provider_assets_provider"), "provider_assets", ["provider"], unique=False
    )


def downgrade() -> None:
    """Drop the three core tables."""
    op.drop_index(op.f("ix_provider_assets_provider"), table_name="provider_assets")
    op.drop_table("provider_assets")
    op.drop_table("credentials")
    op.drop_index("idx_content_item_channel_stage", table_name="content_items")
    op.drop_index(op.f("ix_content_items_stage"), table_name="content_items")
    op.drop_index(op.f("ix_content_items_channel_id"), table_name="content_items")
    op.drop_table("content_items")
