"""Initial schema

Revision ID: 001
Revises:
Create Date: 2025-11-03

Creates the competitor, signal, preference and profile tables. The unique
constraint on signals.content_hash is what makes signal deduplication safe
when two collection runs overlap.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # user_profiles table
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # competitors table
    op.create_table(
        "competitors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("rss_feeds", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_competitors_user_id", "competitors", ["user_id"])

    # user_preferences table
    op.create_table(
        "user_preferences",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("signal_types", sa.Text(), nullable=True),
        sa.Column("delivery_email", sa.Boolean(), nullable=False, default=True),
        sa.Column("delivery_dashboard", sa.Boolean(), nullable=False, default=True),
        sa.Column("check_frequency_hours", sa.Integer(), nullable=False),
        sa.Column("email_digest_frequency_hours", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )

    # signals table
    op.create_table(
        "signals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("competitor_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("signal_type", sa.Text(), nullable=False),
        sa.Column("sentiment", sa.Text(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=False),
        sa.Column("source_name", sa.Text(), nullable=True),
        sa.Column("is_high_priority", sa.Boolean(), nullable=False, default=False),
        sa.Column("published_at", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("notified_at", sa.Integer(), nullable=True),
        sa.Column("content_hash", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("content_hash", name="uq_signals_content_hash"),
    )
    op.create_index("idx_signals_user_created", "signals", ["user_id", "created_at"])
    op.create_index("idx_signals_competitor_id", "signals", ["competitor_id"])


def downgrade() -> None:
    op.drop_index("idx_signals_competitor_id", table_name="signals")
    op.drop_index("idx_signals_user_created", table_name="signals")
    op.drop_table("signals")
    op.drop_table("user_preferences")
    op.drop_index("idx_competitors_user_id", table_name="competitors")
    op.drop_table("competitors")
    op.drop_table("user_profiles")
