"""Retry-queue drain: one queued post per invocation.

Stale entries are discarded and recorded as Skipped_Stale_Queue without
ever being sent. The outcome is committed before returning.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import QueueConfig, settings
from ..db.notifications import PostType, QueuedPost
from ..logging import logger
from ..models import DeliveryResult, DrainOutcome
from ..persistence import IdempotencyLedger, PostQueue
from ..social import SocialPoster
from ..utils.datetime_utils import hours_between, now_utc


def _drain(
    entry: QueuedPost,
    queue: PostQueue,
    ledger: IdempotencyLedger,
    poster: SocialPoster,
    now: datetime,
    config: QueueConfig,
) -> DrainOutcome:
    age_hours = hours_between(entry.created_at, now)
    if age_hours > config.expiration_hours:
        queue.delete(entry)
        ledger.record(entry.game_id, PostType.skipped_stale_queue, entry.details)
        logger.warning(
            "queue_entry_stale",
            game_id=entry.game_id,
            queue_id=entry.id,
            age_hours=round(age_hours, 2),
        )
        return DrainOutcome.discarded_stale

    if ledger.has_recorded(entry.game_id, entry.details):
        queue.delete(entry)
        logger.info("queue_entry_already_posted", game_id=entry.game_id, queue_id=entry.id)
        return DrainOutcome.already_posted

    result = poster.deliver(entry.post_text)
    if result is DeliveryResult.delivered:
        queue.delete(entry)
        ledger.record(entry.game_id, PostType.final_from_queue, entry.details)
        return DrainOutcome.delivered

    queue.touch(entry, now)
    logger.info(
        "queue_entry_retry_later",
        game_id=entry.game_id,
        queue_id=entry.id,
        result=result.value,
    )
    if result is DeliveryResult.rate_limited:
        return DrainOutcome.retry_later
    return DrainOutcome.error


def drain_one(
    session: Session,
    poster: SocialPoster,
    now: datetime | None = None,
    config: QueueConfig | None = None,
) -> DrainOutcome:
    """Attempt the oldest queued post."""
    config = config or settings.queue_config
    now = now or now_utc()
    queue = PostQueue(session)
    ledger = IdempotencyLedger(session)

    entry = queue.oldest()
    if entry is None:
        logger.debug("queue_empty")
        return DrainOutcome.empty

    game_id = entry.game_id
    try:
        with session.begin_nested():
            outcome = _drain(entry, queue, ledger, poster, now, config)
    except Exception as exc:
        logger.exception("queue_drain_failed", game_id=game_id, error=str(exc))
        return DrainOutcome.error

    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("queue_drain_commit_failed", game_id=game_id, error=str(exc))
        return DrainOutcome.error

    logger.info(
        "queue_drain_complete",
        game_id=game_id,
        outcome=outcome.value,
        remaining=queue.pending_count(),
    )
    return outcome
