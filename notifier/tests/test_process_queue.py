"""Tests for the retry-queue drain."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from scorigami_notifier.config import QueueConfig
from scorigami_notifier.db.notifications import PostedUpdate, PostType, QueuedPost
from scorigami_notifier.jobs.process_queue import drain_one
from scorigami_notifier.models import DeliveryResult, DrainOutcome
from scorigami_notifier.persistence import FINAL_DETAILS, IdempotencyLedger, PostQueue

QUEUED_AT = datetime(2024, 9, 15, 2, 0, tzinfo=timezone.utc)
CONFIG = QueueConfig(expiration_hours=2)


def _records(session) -> list[tuple[int, str, str]]:
    rows = session.execute(select(PostedUpdate).order_by(PostedUpdate.id)).scalars()
    return [(r.game_id, r.post_type, r.details) for r in rows]


def _queue_one(session, game_id=745001, text="Dodgers 13, Rockies 2\nFinal"):
    PostQueue(session).enqueue(game_id, FINAL_DETAILS, text, now=QUEUED_AT)


class TestDrainOne:
    def test_empty_queue(self, session, poster):
        assert drain_one(session, poster, config=CONFIG) is DrainOutcome.empty
        poster.deliver.assert_not_called()

    def test_delivers_and_records(self, session, poster):
        _queue_one(session)

        outcome = drain_one(session, poster, now=QUEUED_AT + timedelta(minutes=10), config=CONFIG)

        assert outcome is DrainOutcome.delivered
        poster.deliver.assert_called_once_with("Dodgers 13, Rockies 2\nFinal")
        assert PostQueue(session).pending_count() == 0
        assert _records(session) == [(745001, "Final_From_Queue", "Final")]

    def test_stale_entry_is_discarded_without_sending(self, session, poster):
        _queue_one(session)

        outcome = drain_one(
            session, poster, now=QUEUED_AT + timedelta(hours=2, minutes=1), config=CONFIG
        )

        assert outcome is DrainOutcome.discarded_stale
        poster.deliver.assert_not_called()
        assert PostQueue(session).pending_count() == 0
        assert _records(session) == [(745001, "Skipped_Stale_Queue", "Final")]

    def test_stale_discard_blocks_later_poll(self, session, poster):
        _queue_one(session)
        drain_one(session, poster, now=QUEUED_AT + timedelta(hours=3), config=CONFIG)

        assert IdempotencyLedger(session).has_recorded(745001, FINAL_DETAILS)

    def test_rate_limited_entry_stays_queued(self, session, poster):
        poster.deliver.return_value = DeliveryResult.rate_limited
        _queue_one(session)
        attempt = QUEUED_AT + timedelta(minutes=30)

        outcome = drain_one(session, poster, now=attempt, config=CONFIG)

        assert outcome is DrainOutcome.retry_later
        entry = session.execute(select(QueuedPost)).scalar_one()
        assert entry.last_attempt_at.replace(tzinfo=None) == attempt.replace(tzinfo=None)
        assert _records(session) == []

    def test_other_error_stays_queued(self, session, poster):
        poster.deliver.return_value = DeliveryResult.other_error
        _queue_one(session)

        outcome = drain_one(session, poster, now=QUEUED_AT + timedelta(minutes=30), config=CONFIG)

        assert outcome is DrainOutcome.error
        assert PostQueue(session).has_pending(745001)

    def test_already_recorded_entry_is_removed_without_sending(self, session, poster):
        _queue_one(session)
        IdempotencyLedger(session).record(745001, PostType.final, FINAL_DETAILS)

        outcome = drain_one(session, poster, now=QUEUED_AT + timedelta(minutes=5), config=CONFIG)

        assert outcome is DrainOutcome.already_posted
        poster.deliver.assert_not_called()
        assert PostQueue(session).pending_count() == 0

    def test_drains_oldest_first(self, session, poster):
        PostQueue(session).enqueue(2, FINAL_DETAILS, "newer", now=QUEUED_AT + timedelta(minutes=5))
        PostQueue(session).enqueue(1, FINAL_DETAILS, "older", now=QUEUED_AT)

        drain_one(session, poster, now=QUEUED_AT + timedelta(minutes=10), config=CONFIG)

        poster.deliver.assert_called_once_with("older")
        assert PostQueue(session).has_pending(2)

    def test_unexpected_failure_is_contained(self, session, poster):
        poster.deliver.side_effect = RuntimeError("boom")
        _queue_one(session)

        outcome = drain_one(session, poster, now=QUEUED_AT + timedelta(minutes=5), config=CONFIG)

        assert outcome is DrainOutcome.error
        assert PostQueue(session).has_pending(745001)

    def test_delivery_is_committed_before_returning(self, file_engine, poster):
        with Session(file_engine, expire_on_commit=False) as session:
            _queue_one(session)
            session.commit()

            outcome = drain_one(
                session, poster, now=QUEUED_AT + timedelta(minutes=10), config=CONFIG
            )

            assert outcome is DrainOutcome.delivered
            with Session(file_engine) as other:
                assert IdempotencyLedger(other).has_recorded(745001, FINAL_DETAILS)
                assert not PostQueue(other).has_pending(745001)
