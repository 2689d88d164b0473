"""Game state poller: one pass over today's MLB schedule.

Finals:
- Skip if the ledger already holds ("Final") or a queued post is pending
- Classify against league and franchise history
- Low-value finals are recorded as Skipped_Low_Value and never posted
- Nothing to say is recorded as Processed_No_Post
- Delivered posts are recorded as Final; rate-limited ones are queued

Blow-outs in progress:
- At most one forecast per inning, and none when the score has not moved
  since the last forecast
- Forecasts are never queued

Games are processed one at a time, each inside its own savepoint. Each
game's ledger and queue writes are committed before the next game starts;
a failure on one game is logged and the pass moves on.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Literal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.notifications import PostType
from ..live import MLBFeedError, MLBLiveFeedClient
from ..logging import logger
from ..models import DeliveryResult, Franchise, GameSnapshot, ScoreKey
from ..normalization import FranchiseResolver
from ..persistence import (
    FINAL_DETAILS,
    HistoricalLedgerReader,
    HistoryReadError,
    IdempotencyLedger,
    PostQueue,
    forecast_details,
)
from ..services import classify_final, forecast_franchise_scorigami, is_low_value, should_forecast
from ..services.forecast import ForecastCache
from ..social import SocialPoster, compose_final, compose_forecast
from ..utils.datetime_utils import today_et

GameOutcome = Literal["final_posted", "forecast_posted", "queued", "skipped", "ignored", "error"]


@dataclass
class PollSummary:
    games_seen: int = 0
    finals_posted: int = 0
    forecasts_posted: int = 0
    queued: int = 0
    skipped: int = 0
    errors: int = 0

    def record(self, outcome: GameOutcome) -> None:
        if outcome == "final_posted":
            self.finals_posted += 1
        elif outcome == "forecast_posted":
            self.forecasts_posted += 1
        elif outcome == "queued":
            self.queued += 1
        elif outcome == "skipped":
            self.skipped += 1
        elif outcome == "error":
            self.errors += 1

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class GamePoller:
    """Walks each game of one poll through classification and delivery."""

    def __init__(
        self,
        session: Session,
        feed_client: MLBLiveFeedClient,
        poster: SocialPoster,
        resolver: FranchiseResolver | None = None,
    ) -> None:
        self.session = session
        self.feed_client = feed_client
        self.poster = poster
        self.resolver = resolver or FranchiseResolver.from_session(session)
        self.reader = HistoricalLedgerReader(session)
        self.ledger = IdempotencyLedger(session)
        self.queue = PostQueue(session)

    def _franchises(self, game: GameSnapshot) -> tuple[Franchise, Franchise]:
        return (
            self.resolver.resolve(game.home_id, game.home_name),
            self.resolver.resolve(game.away_id, game.away_name),
        )

    def process(self, game: GameSnapshot) -> GameOutcome:
        if game.is_in_progress:
            try:
                game = self.feed_client.fetch_live_snapshot(game)
            except MLBFeedError as exc:
                logger.warning("live_feed_failed", game_id=game.game_id, error=str(exc))
                return "skipped"

        if game.is_final:
            return self.process_final(game)
        if game.is_in_progress and should_forecast(game):
            return self.process_forecast(game)
        return "ignored"

    def process_final(self, game: GameSnapshot) -> GameOutcome:
        if self.ledger.has_recorded(game.game_id, FINAL_DETAILS):
            logger.debug("final_already_recorded", game_id=game.game_id)
            return "skipped"
        if self.queue.has_pending(game.game_id):
            logger.info("final_pending_in_queue", game_id=game.game_id)
            return "skipped"

        home, away = self._franchises(game)
        if is_low_value(game):
            self._classify_low_value(game, home, away)
            self.ledger.record(
                game.game_id, PostType.skipped_low_value, FINAL_DETAILS, game.score_snapshot
            )
            return "skipped"

        classification = classify_final(game, home, away, self.reader)
        logger.info(
            "final_classified",
            game_id=game.game_id,
            score=game.score_snapshot,
            kind=classification.kind.value,
        )

        text = compose_final(game, classification, home=home, away=away)
        if not text:
            self.ledger.record(
                game.game_id, PostType.processed_no_post, FINAL_DETAILS, game.score_snapshot
            )
            return "skipped"

        result = self.poster.deliver(text)
        if result is DeliveryResult.delivered:
            self.ledger.record(game.game_id, PostType.final, FINAL_DETAILS, game.score_snapshot)
            return "final_posted"
        if result is DeliveryResult.rate_limited:
            if self.queue.enqueue(game.game_id, FINAL_DETAILS, text):
                return "queued"
            return "skipped"

        logger.error("final_delivery_failed", game_id=game.game_id)
        return "error"

    def _classify_low_value(self, game: GameSnapshot, home: Franchise, away: Franchise) -> None:
        """Classify for the log only; a failure must not block the skip record."""
        try:
            with self.session.begin_nested():
                classification = classify_final(game, home, away, self.reader)
        except Exception as exc:
            logger.warning(
                "low_value_classification_failed",
                game_id=game.game_id,
                score=game.score_snapshot,
                error=str(exc),
            )
            return
        logger.info(
            "final_classified",
            game_id=game.game_id,
            score=game.score_snapshot,
            kind=classification.kind.value,
            low_value=True,
        )

    def _franchise_check(self, franchise: Franchise, score_key: ScoreKey) -> bool:
        try:
            return self.reader.has_occurred_for_franchise(franchise, score_key)
        except HistoryReadError:
            # Unanswerable means "not new"
            return True

    def process_forecast(self, game: GameSnapshot) -> GameOutcome:
        details = forecast_details(game.inning)
        if self.ledger.has_recorded(game.game_id, details):
            logger.debug("forecast_already_recorded", game_id=game.game_id, details=details)
            return "skipped"
        if self.ledger.last_forecast_snapshot(game.game_id) == game.score_snapshot:
            logger.info(
                "forecast_score_unchanged",
                game_id=game.game_id,
                score=game.score_snapshot,
            )
            return "skipped"

        home, away = self._franchises(game)
        result = forecast_franchise_scorigami(
            game, home, away, self._franchise_check, cache=ForecastCache()
        )
        if result is None:
            return "skipped"

        text = compose_forecast(game, result, home=home, away=away)
        delivery = self.poster.deliver(text)
        if delivery is not DeliveryResult.delivered:
            logger.warning(
                "forecast_delivery_failed",
                game_id=game.game_id,
                details=details,
                result=delivery.value,
            )
            return "error"

        self.ledger.record(game.game_id, PostType.forecast, details, game.score_snapshot)
        return "forecast_posted"


def _commit_game(session: Session, game: GameSnapshot, outcome: GameOutcome) -> GameOutcome:
    """Make one game's decisions visible to overlapping invocations."""
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("game_commit_failed", game_id=game.game_id, error=str(exc))
        return "error"
    return outcome


def check_games(
    session: Session,
    feed_client: MLBLiveFeedClient,
    poster: SocialPoster,
    resolver: FranchiseResolver | None = None,
    day: date | None = None,
) -> PollSummary:
    """Run one poll over the schedule for ``day`` (today, Eastern, by default)."""
    summary = PollSummary()
    day = day or today_et()
    logger.info("check_games_start", date=str(day))

    try:
        games = feed_client.fetch_schedule(day)
    except MLBFeedError as exc:
        logger.error("schedule_fetch_failed", date=str(day), error=str(exc))
        return summary

    poller = GamePoller(session, feed_client, poster, resolver=resolver)
    for game in games:
        summary.games_seen += 1
        try:
            with session.begin_nested():
                outcome = poller.process(game)
        except Exception as exc:
            logger.exception("game_processing_failed", game_id=game.game_id, error=str(exc))
            outcome = "error"
        outcome = _commit_game(session, game, outcome)
        summary.record(outcome)

    logger.info("check_games_complete", date=str(day), **summary.as_dict())
    return summary
