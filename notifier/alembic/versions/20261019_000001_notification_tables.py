"""Create posted_updates ledger and post_queue."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "20261019_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "posted_updates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("game_id", sa.BigInteger(), nullable=False),
        sa.Column("post_type", sa.String(length=40), nullable=False),
        sa.Column("details", sa.String(length=80), nullable=False),
        sa.Column("score_snapshot", sa.String(length=20), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("game_id", "details", name="uq_posted_updates_game_details"),
    )
    op.create_index("ix_posted_updates_game_id", "posted_updates", ["game_id"])
    op.create_index(
        "idx_posted_updates_game_created", "posted_updates", ["game_id", "created_at"]
    )

    op.create_table(
        "post_queue",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("game_id", sa.BigInteger(), nullable=False, unique=True),
        sa.Column("details", sa.String(length=80), nullable=False),
        sa.Column("post_text", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="queued", nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("last_attempt_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_post_queue_status", "post_queue", ["status"])
    op.create_index("idx_post_queue_status_created", "post_queue", ["status", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_post_queue_status_created", table_name="post_queue")
    op.drop_index("ix_post_queue_status", table_name="post_queue")
    op.drop_table("post_queue")
    op.drop_index("idx_posted_updates_game_created", table_name="posted_updates")
    op.drop_index("ix_posted_updates_game_id", table_name="posted_updates")
    op.drop_table("posted_updates")
