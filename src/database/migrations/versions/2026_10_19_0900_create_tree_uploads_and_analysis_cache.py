"""Create tree_uploads and tree_image_analysis_cache tables

Revision ID: 3c1f9a7d2b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3c1f9a7d2b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tree_uploads",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("tree_count", sa.Integer(), nullable=True),
        sa.Column("co2_offset", sa.Float(), nullable=True),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tree_uploads_user_id", "tree_uploads", ["user_id"])

    op.create_table(
        "tree_image_analysis_cache",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("image_hash", sa.String(length=64), nullable=False),
        sa.Column("tree_count", sa.Integer(), nullable=False),
        sa.Column("land_cover_class", sa.String(), nullable=False),
        sa.Column("estimated_area_hectares", sa.Float(), nullable=False),
        sa.Column("confidence", sa.String(), nullable=False),
        sa.Column("analysis_notes", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique index doubles as the cache key constraint
    op.create_index(
        "ix_tree_image_analysis_cache_image_hash",
        "tree_image_analysis_cache",
        ["image_hash"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index(
        "ix_tree_image_analysis_cache_image_hash",
        table_name="tree_image_analysis_cache",
    )
    op.drop_table("tree_image_analysis_cache")
    op.drop_index("ix_tree_uploads_user_id", table_name="tree_uploads")
    op.drop_table("tree_uploads")
