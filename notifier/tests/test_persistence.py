"""Tests for the history reader, idempotency ledger and retry queue."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from scorigami_notifier.config import HistoryFilterConfig
from scorigami_notifier.db.notifications import PostedUpdate, PostType, QueuedPost
from scorigami_notifier.models import ScoreKey
from scorigami_notifier.normalization import FranchiseResolver
from scorigami_notifier.persistence import (
    FINAL_DETAILS,
    HistoricalLedgerReader,
    HistoryReadError,
    IdempotencyLedger,
    PostQueue,
    forecast_details,
)

DODGERS = FranchiseResolver().resolve(119)
ROCKIES = FranchiseResolver().resolve(115)


def _broken_session() -> MagicMock:
    session = MagicMock()
    session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("db down"))
    return session


# ============================================================================
# HistoricalLedgerReader
# ============================================================================


class TestHistoricalLedgerReader:
    def test_league_wide_match_in_either_orientation(self, session, add_gamelog):
        add_gamelog("COL", 2, "LAN", 13)
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())

        assert reader.has_occurred_league_wide(ScoreKey.traditional(13, 2)).is_new is False
        assert reader.has_occurred_league_wide(ScoreKey.traditional(2, 13)).is_new is False

    def test_new_score_reports_next_ordinal(self, session, add_gamelog):
        add_gamelog("COL", 2, "LAN", 13)
        add_gamelog("SFN", 13, "LAN", 2)  # same traditional score
        add_gamelog("COL", 3, "LAN", 4)
        add_gamelog("COL", 0, "LAN", 1)
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())

        assert reader.count_distinct_scores() == 3
        check = reader.has_occurred_league_wide(ScoreKey.traditional(27, 3))
        assert check.is_new
        assert check.new_count == 4

    def test_franchise_check_follows_lineage(self, session, add_gamelog):
        # Brooklyn beat the Giants 4-3 on the road
        add_gamelog("BRO", 4, "NY1", 3)
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())

        assert reader.has_occurred_for_franchise(DODGERS, ScoreKey.oriented(4, 3))
        assert not reader.has_occurred_for_franchise(DODGERS, ScoreKey.oriented(3, 4))

    def test_franchise_check_is_per_franchise(self, session, add_gamelog):
        add_gamelog("COL", 3, "LAN", 4)
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())

        assert reader.has_occurred_for_franchise(DODGERS, ScoreKey.oriented(4, 3))
        assert reader.has_occurred_for_franchise(ROCKIES, ScoreKey.oriented(3, 4))
        assert not reader.has_occurred_for_franchise(ROCKIES, ScoreKey.oriented(4, 3))

    def test_franchise_check_requires_oriented_key(self, session):
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())
        with pytest.raises(ValueError):
            reader.has_occurred_for_franchise(DODGERS, ScoreKey.traditional(4, 3))

    def test_count_franchise_scores(self, session, add_gamelog):
        add_gamelog("COL", 3, "LAN", 4)
        add_gamelog("LAN", 4, "SFN", 3)  # same oriented score for LAN
        add_gamelog("LAN", 3, "SFN", 4)
        add_gamelog("COL", 1, "SDN", 0)  # not a Dodgers game
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())

        assert reader.count_franchise_scores(DODGERS) == 2

    def test_negro_league_rows_excluded_by_default(self, session, add_gamelog):
        add_gamelog("KCM", 21, "CAG", 20, is_negro_league=True)
        default_reader = HistoricalLedgerReader(session, HistoryFilterConfig())
        inclusive_reader = HistoricalLedgerReader(
            session, HistoryFilterConfig(include_negro_leagues=True)
        )

        assert default_reader.has_occurred_league_wide(ScoreKey.traditional(21, 20)).is_new
        assert not inclusive_reader.has_occurred_league_wide(ScoreKey.traditional(21, 20)).is_new

    def test_game_type_filter(self, session, add_gamelog):
        add_gamelog("COL", 9, "LAN", 8, game_type="P")
        reader = HistoricalLedgerReader(session, HistoryFilterConfig(game_types=["R"]))
        assert reader.has_occurred_league_wide(ScoreKey.traditional(9, 8)).is_new

    def test_get_frequency_reports_most_recent(self, session, add_gamelog):
        add_gamelog("COL", 2, "LAN", 5, date=19980412)
        add_gamelog("LAN", 5, "SFN", 2, date=20230801)
        add_gamelog("SDN", 2, "ARI", 5, date=20110503)
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())

        record = reader.get_frequency(ScoreKey.traditional(5, 2))
        assert record.occurrences == 3
        assert record.last_date == date(2023, 8, 1)
        assert (record.last_visitor_team, record.last_home_team) == ("LAN", "SFN")

    def test_get_frequency_never_seen(self, session):
        record = HistoricalLedgerReader(session, HistoryFilterConfig()).get_frequency(
            ScoreKey.traditional(30, 29)
        )
        assert not record.has_occurred
        assert record.last_date is None

    def test_read_errors_are_wrapped(self):
        reader = HistoricalLedgerReader(_broken_session(), HistoryFilterConfig())
        with pytest.raises(HistoryReadError):
            reader.has_occurred_league_wide(ScoreKey.traditional(3, 2))


# ============================================================================
# IdempotencyLedger
# ============================================================================


class TestIdempotencyLedger:
    def test_record_then_has_recorded(self, session):
        ledger = IdempotencyLedger(session)
        assert not ledger.has_recorded(745001, FINAL_DETAILS)

        assert ledger.record(745001, PostType.final, FINAL_DETAILS, "3-5") is True
        assert ledger.has_recorded(745001, FINAL_DETAILS)

    def test_second_record_is_skipped(self, session):
        ledger = IdempotencyLedger(session)
        assert ledger.record(745001, PostType.final, FINAL_DETAILS) is True
        assert ledger.record(745001, PostType.final_from_queue, FINAL_DETAILS) is False

        rows = session.execute(select(PostedUpdate)).scalars().all()
        assert len(rows) == 1
        assert rows[0].post_type == "Final"

    def test_details_distinguish_records(self, session):
        ledger = IdempotencyLedger(session)
        ledger.record(745001, PostType.forecast, forecast_details(7), "1-11")
        assert ledger.has_recorded(745001, "Forecast_Inning_7")
        assert not ledger.has_recorded(745001, "Forecast_Inning_8")
        assert not ledger.has_recorded(745001, FINAL_DETAILS)

    def test_failed_check_counts_as_recorded(self):
        assert IdempotencyLedger(_broken_session()).has_recorded(1, FINAL_DETAILS) is True

    def test_last_forecast_snapshot(self, session):
        ledger = IdempotencyLedger(session)
        assert ledger.last_forecast_snapshot(745001) is None

        ledger.record(745001, PostType.forecast, forecast_details(6), "0-10")
        session.execute(
            PostedUpdate.__table__.update()
            .where(PostedUpdate.details == "Forecast_Inning_6")
            .values(created_at=datetime(2024, 9, 14, 20, 0, tzinfo=timezone.utc))
        )
        ledger.record(745001, PostType.forecast, forecast_details(7), "1-11")
        ledger.record(745001, PostType.final, FINAL_DETAILS, "1-12")

        assert ledger.last_forecast_snapshot(745001) == "1-11"


# ============================================================================
# PostQueue
# ============================================================================


class TestPostQueue:
    def test_enqueue_and_oldest(self, session):
        queue = PostQueue(session)
        older = datetime(2024, 9, 14, 20, 0, tzinfo=timezone.utc)
        assert queue.enqueue(2, FINAL_DETAILS, "second", now=older + timedelta(minutes=5))
        assert queue.enqueue(1, FINAL_DETAILS, "first", now=older)

        assert queue.has_pending(1)
        assert queue.pending_count() == 2
        assert queue.oldest().post_text == "first"

    def test_enqueue_is_one_per_game(self, session):
        queue = PostQueue(session)
        assert queue.enqueue(1, FINAL_DETAILS, "text") is True
        assert queue.enqueue(1, FINAL_DETAILS, "other text") is False
        assert queue.pending_count() == 1

    def test_delete(self, session):
        queue = PostQueue(session)
        queue.enqueue(1, FINAL_DETAILS, "text")
        queue.delete(queue.oldest())
        assert queue.oldest() is None
        assert not queue.has_pending(1)

    def test_touch_stamps_last_attempt(self, session):
        queue = PostQueue(session)
        queue.enqueue(1, FINAL_DETAILS, "text")
        entry = queue.oldest()
        attempted = datetime(2024, 9, 14, 21, 0, tzinfo=timezone.utc)

        queue.touch(entry, attempted)

        stored = session.execute(select(QueuedPost.last_attempt_at)).scalar_one()
        assert stored.replace(tzinfo=None) == attempted.replace(tzinfo=None)
        assert queue.has_pending(1)


# ============================================================================
# Read failures
# ============================================================================


class TestReadFailures:
    def test_failed_history_read_leaves_transaction_usable(self, session, aborting_reads):
        reader = HistoricalLedgerReader(session, HistoryFilterConfig())
        ledger = IdempotencyLedger(session)
        aborting_reads("gamelogs")

        with pytest.raises(HistoryReadError):
            reader.get_frequency(ScoreKey.traditional(5, 3))

        assert ledger.record(745001, PostType.final, FINAL_DETAILS, "3-5") is True
        session.commit()
        assert ledger.has_recorded(745001, FINAL_DETAILS)

    def test_failed_ledger_check_leaves_transaction_usable(self, session, aborting_reads):
        ledger = IdempotencyLedger(session)
        aborting_reads("posted_updates")

        assert ledger.has_recorded(745001, FINAL_DETAILS) is True
        assert ledger.record(745001, PostType.final, FINAL_DETAILS, "3-5") is True

