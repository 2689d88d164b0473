"""Read-only queries against the historical game record.

League-wide questions use traditional (winner, loser) keys and match a
game in either home/visitor orientation. Franchise questions use oriented
(franchise runs, opponent runs) keys and match the franchise on either
side, under every team code in its lineage.
"""

from __future__ import annotations

from sqlalchemy import Select, and_, case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import HistoryFilterConfig, settings
from ..db.history import GameLog
from ..logging import logger
from ..models import Franchise, HistoricalRecord, LeagueCheck, ScoreKey
from ..utils.parsing import parse_game_date


class HistoryReadError(RuntimeError):
    """Raised when the historical store cannot answer a query."""


_home_won_or_tied = GameLog.home_score >= GameLog.visitor_score
_winner_runs = case((_home_won_or_tied, GameLog.home_score), else_=GameLog.visitor_score)
_loser_runs = case((_home_won_or_tied, GameLog.visitor_score), else_=GameLog.home_score)


def _either_orientation(score_key: ScoreKey):
    return or_(
        and_(GameLog.home_score == score_key.first, GameLog.visitor_score == score_key.second),
        and_(GameLog.home_score == score_key.second, GameLog.visitor_score == score_key.first),
    )


def _franchise_oriented(franchise: Franchise, score_key: ScoreKey):
    codes = franchise.team_codes
    return or_(
        and_(
            GameLog.home_team.in_(codes),
            GameLog.home_score == score_key.first,
            GameLog.visitor_score == score_key.second,
        ),
        and_(
            GameLog.visitor_team.in_(codes),
            GameLog.visitor_score == score_key.first,
            GameLog.home_score == score_key.second,
        ),
    )


class HistoricalLedgerReader:
    """Answers "has this score happened before?" for one request."""

    def __init__(self, session: Session, history_filter: HistoryFilterConfig | None = None) -> None:
        self.session = session
        self.history_filter = history_filter or settings.history_filter

    def _filtered(self, stmt: Select) -> Select:
        if not self.history_filter.include_negro_leagues:
            stmt = stmt.where(GameLog.is_negro_league.is_(False))
        if self.history_filter.game_types:
            stmt = stmt.where(GameLog.game_type.in_(self.history_filter.game_types))
        return stmt

    def _scalar(self, stmt: Select, query_name: str, **context):
        """Run one read in its own savepoint; a failure rolls back only that read."""
        try:
            with self.session.begin_nested():
                return self.session.execute(stmt).scalar()
        except SQLAlchemyError as exc:
            logger.error("history_query_failed", query=query_name, error=str(exc), **context)
            raise HistoryReadError(f"{query_name} failed: {exc}") from exc

    def count_distinct_scores(self) -> int:
        """Number of distinct (winner, loser) finals in the record."""
        pairs = self._filtered(
            select(_winner_runs.label("winner"), _loser_runs.label("loser"))
        ).distinct().subquery()
        return int(self._scalar(select(func.count()).select_from(pairs), "count_distinct_scores") or 0)

    def has_occurred_league_wide(self, score_key: ScoreKey) -> LeagueCheck:
        """Check a final score against the whole league record.

        A new score reports the ordinal it would take: the prior number of
        distinct scores plus one.
        """
        key = score_key.as_traditional()
        stmt = self._filtered(select(GameLog.game_id).where(_either_orientation(key))).limit(1)
        found = self._scalar(stmt, "has_occurred_league_wide", score=str(key))
        if found is not None:
            return LeagueCheck(is_new=False)
        return LeagueCheck(is_new=True, new_count=self.count_distinct_scores() + 1)

    def has_occurred_for_franchise(self, franchise: Franchise, score_key: ScoreKey) -> bool:
        if score_key.orientation != "oriented":
            raise ValueError("Franchise history is keyed by oriented scores")
        stmt = self._filtered(
            select(GameLog.game_id).where(_franchise_oriented(franchise, score_key))
        ).limit(1)
        found = self._scalar(
            stmt,
            "has_occurred_for_franchise",
            franchise=franchise.franchise_id,
            score=str(score_key),
        )
        return found is not None

    def count_franchise_scores(self, franchise: Franchise) -> int:
        """Number of distinct oriented finals the franchise has recorded."""
        codes = franchise.team_codes
        is_home = GameLog.home_team.in_(codes)
        team_runs = case((is_home, GameLog.home_score), else_=GameLog.visitor_score)
        opponent_runs = case((is_home, GameLog.visitor_score), else_=GameLog.home_score)
        pairs = self._filtered(
            select(team_runs.label("team_runs"), opponent_runs.label("opponent_runs")).where(
                or_(is_home, GameLog.visitor_team.in_(codes))
            )
        ).distinct().subquery()
        count = self._scalar(
            select(func.count()).select_from(pairs),
            "count_franchise_scores",
            franchise=franchise.franchise_id,
        )
        return int(count or 0)

    def get_frequency(self, score_key: ScoreKey) -> HistoricalRecord:
        """How often a final score has happened and when it last did."""
        key = score_key.as_traditional()
        occurrences = self._scalar(
            self._filtered(select(func.count(GameLog.game_id)).where(_either_orientation(key))),
            "get_frequency_count",
            score=str(key),
        )
        if not occurrences:
            return HistoricalRecord()

        stmt = (
            self._filtered(
                select(GameLog.date, GameLog.home_team, GameLog.visitor_team).where(
                    _either_orientation(key)
                )
            )
            .order_by(GameLog.date.desc(), GameLog.game_id.desc())
            .limit(1)
        )
        try:
            with self.session.begin_nested():
                last = self.session.execute(stmt).first()
        except SQLAlchemyError as exc:
            logger.error("history_query_failed", query="get_frequency_last", error=str(exc))
            raise HistoryReadError(f"get_frequency_last failed: {exc}") from exc

        if last is None:
            return HistoricalRecord(occurrences=int(occurrences))
        return HistoricalRecord(
            occurrences=int(occurrences),
            last_date=parse_game_date(last.date),
            last_home_team=last.home_team,
            last_visitor_team=last.visitor_team,
        )
