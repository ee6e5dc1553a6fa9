"""Create insights cache table

Revision ID: 001_insights_cache
Revises:
Create Date: 2026-10-19

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_insights_cache"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the per-identity insights document store."""
    op.create_table(
        "insights_cache",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("object_name", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=False, server_default="application/json"),
        sa.Column("data_json", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("object_name", name="uq_insights_cache_object_name"),
    )


def downgrade() -> None:
    """Drop the insights cache table."""
    op.drop_table("insights_cache")
