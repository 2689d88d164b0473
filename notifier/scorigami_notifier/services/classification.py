"""Classify a final score against league and franchise history."""

from __future__ import annotations

from ..config import NotificationConfig, settings
from ..logging import logger
from ..models import (
    Classification,
    ClassificationKind,
    Franchise,
    FranchiseHit,
    GameSnapshot,
    HistoricalRecord,
    ScoreKey,
)
from ..persistence.history import HistoricalLedgerReader, HistoryReadError


def is_low_value(game: GameSnapshot, config: NotificationConfig | None = None) -> bool:
    """Finals below the combined-runs floor are never announced."""
    config = config or settings.notification_config
    return game.total_runs < config.min_combined_runs


def frequency_or_empty(reader: HistoricalLedgerReader, score_key: ScoreKey) -> HistoricalRecord:
    """Frequency lookup that degrades to "no history" instead of failing."""
    try:
        return reader.get_frequency(score_key)
    except HistoryReadError:
        logger.warning("score_frequency_unavailable", score=str(score_key))
        return HistoricalRecord()


def _franchise_hit(
    reader: HistoricalLedgerReader,
    game: GameSnapshot,
    franchise: Franchise,
    team_name: str,
    for_home: bool,
) -> FranchiseHit | None:
    if franchise.is_fallback:
        # No lineage codes, so the history would always look empty
        logger.info(
            "franchise_check_skipped_unmapped",
            game_id=game.game_id,
            franchise_id=franchise.franchise_id,
        )
        return None

    oriented = game.oriented_key(for_home)
    try:
        if reader.has_occurred_for_franchise(franchise, oriented):
            return None
        new_count = reader.count_franchise_scores(franchise) + 1
    except HistoryReadError:
        logger.warning(
            "franchise_check_unavailable",
            game_id=game.game_id,
            franchise_id=franchise.franchise_id,
            score=str(oriented),
        )
        return None
    return FranchiseHit(franchise=franchise, team_name=team_name, new_count=new_count)


def classify_final(
    game: GameSnapshot,
    home: Franchise,
    away: Franchise,
    reader: HistoricalLedgerReader,
) -> Classification:
    """Decide how a final score should be announced.

    Ties short-circuit before any uniqueness check. A league-wide check
    that cannot be answered counts as "seen before".
    """
    score_key = game.final_score_key()

    if game.is_tie:
        return Classification(
            kind=ClassificationKind.tie,
            history=frequency_or_empty(reader, score_key),
        )

    try:
        league = reader.has_occurred_league_wide(score_key)
    except HistoryReadError:
        logger.warning("league_check_unavailable", game_id=game.game_id, score=str(score_key))
        league = None

    if league is not None and league.is_new:
        logger.info(
            "true_scorigami_detected",
            game_id=game.game_id,
            score=str(score_key),
            new_count=league.new_count,
        )
        return Classification(kind=ClassificationKind.true_unique, league_count=league.new_count)

    hits = [
        hit
        for hit in (
            _franchise_hit(reader, game, away, game.away_name, for_home=False),
            _franchise_hit(reader, game, home, game.home_name, for_home=True),
        )
        if hit is not None
    ]
    history = frequency_or_empty(reader, score_key)

    if hits:
        logger.info(
            "franchise_scorigami_detected",
            game_id=game.game_id,
            score=str(score_key),
            franchises=[hit.franchise.franchise_id for hit in hits],
        )
        return Classification(
            kind=ClassificationKind.franchise_unique,
            franchise_hits=tuple(hits),
            history=history,
        )

    return Classification(kind=ClassificationKind.not_unique, history=history)
