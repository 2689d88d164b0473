"""Notification bookkeeping: the idempotency ledger and the retry queue."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class PostType(str, Enum):
    """Kinds of terminal decision recorded in the ledger."""

    final = "Final"
    final_from_queue = "Final_From_Queue"
    processed_no_post = "Processed_No_Post"
    skipped_low_value = "Skipped_Low_Value"
    skipped_stale_queue = "Skipped_Stale_Queue"
    forecast = "Forecast"


class QueueStatus(str, Enum):
    queued = "queued"
    delivered = "delivered"
    discarded = "discarded"


class PostedUpdate(Base):
    """Append-only record that a decision was made for (game, details).

    The unique constraint is what makes concurrent pollers safe: a second
    writer for the same pair is skipped at insert time.
    """

    __tablename__ = "posted_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    post_type: Mapped[str] = mapped_column(String(40), nullable=False)
    details: Mapped[str] = mapped_column(String(80), nullable=False)
    score_snapshot: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("game_id", "details", name="uq_posted_updates_game_details"),
        Index("idx_posted_updates_game_created", "game_id", "created_at"),
    )


class QueuedPost(Base):
    """A composed message waiting for the social channel to accept it."""

    __tablename__ = "post_queue"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)
    details: Mapped[str] = mapped_column(String(80), nullable=False)
    post_text: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), server_default=QueueStatus.queued.value, nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_attempt_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("idx_post_queue_status_created", "status", "created_at"),
    )
