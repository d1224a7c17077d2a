"""create social_posts and app_metadata tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "social_posts",
        sa.Column("post_id", sa.String(length=255), primary_key=True),
        sa.Column("platform", sa.String(length=50), nullable=False),
        sa.Column("publish_time", sa.DateTime(), nullable=True),
        sa.Column("permalink", sa.String(length=2048), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("views", sa.Float(), nullable=True),
        sa.Column("reach", sa.Float(), nullable=True),
        sa.Column("interactions", sa.Float(), nullable=True),
        sa.Column("link_clicks", sa.Float(), nullable=True),
        sa.Column("composite_score", sa.Float(), nullable=True),
        sa.Column("rank_within_batch", sa.Integer(), nullable=True),
        sa.Column("last_fetched_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_social_posts_platform", "social_posts", ["platform"])
    op.create_index("ix_social_posts_publish_time", "social_posts", ["publish_time"])
    op.create_index(
        "ix_social_posts_composite_score", "social_posts", ["composite_score"],
    )

    op.create_table(
        "app_metadata",
        sa.Column("key", sa.String(length=100), primary_key=True),
        sa.Column("value_timestamp", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("app_metadata")
    op.drop_index("ix_social_posts_composite_score", table_name="social_posts")
    op.drop_index("ix_social_posts_publish_time", table_name="social_posts")
    op.drop_index("ix_social_posts_platform", table_name="social_posts")
    op.drop_table("social_posts")
