"""Storage for messages the social channel refused with a rate limit.

At most one pending message per game, enforced by a unique game_id.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.notifications import QueuedPost, QueueStatus
from ..logging import logger
from ..utils.datetime_utils import now_utc


class PostQueue:
    def __init__(self, session: Session) -> None:
        self.session = session

    def has_pending(self, game_id: int) -> bool:
        stmt = (
            select(QueuedPost.id)
            .where(QueuedPost.game_id == game_id, QueuedPost.status == QueueStatus.queued.value)
            .limit(1)
        )
        return self.session.execute(stmt).first() is not None

    def enqueue(
        self,
        game_id: int,
        details: str,
        post_text: str,
        now: datetime | None = None,
    ) -> bool:
        """Queue a message; returns False when the game already has one."""
        existing = self.session.execute(
            select(QueuedPost.id).where(QueuedPost.game_id == game_id).limit(1)
        ).first()
        if existing is not None:
            logger.info("post_queue_already_queued", game_id=game_id, queue_id=existing.id)
            return False

        entry = QueuedPost(
            game_id=game_id,
            details=details,
            post_text=post_text,
            status=QueueStatus.queued.value,
            created_at=now or now_utc(),
        )
        try:
            with self.session.begin_nested():
                self.session.add(entry)
                self.session.flush()
        except IntegrityError:
            # Another invocation queued this game between our check and insert
            logger.info("post_queue_already_queued", game_id=game_id, queue_id=None)
            return False

        logger.info("post_queue_enqueued", game_id=game_id, queue_id=entry.id, details=details)
        return True

    def oldest(self) -> QueuedPost | None:
        stmt = (
            select(QueuedPost)
            .where(QueuedPost.status == QueueStatus.queued.value)
            .order_by(QueuedPost.created_at.asc(), QueuedPost.id.asc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def delete(self, entry: QueuedPost) -> None:
        self.session.execute(delete(QueuedPost).where(QueuedPost.id == entry.id))

    def touch(self, entry: QueuedPost, now: datetime | None = None) -> None:
        """Stamp a failed delivery attempt; the entry stays queued."""
        attempted_at = now or now_utc()
        self.session.execute(
            update(QueuedPost).where(QueuedPost.id == entry.id).values(last_attempt_at=attempted_at)
        )
        entry.last_attempt_at = attempted_at

    def pending_count(self) -> int:
        stmt = (
            select(func.count())
            .select_from(QueuedPost)
            .where(QueuedPost.status == QueueStatus.queued.value)
        )
        return int(self.session.execute(stmt).scalar() or 0)
