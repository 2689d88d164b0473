"""Idempotency ledger: which notification decisions were already made.

Callers check before any side effect and record once the decision is
final. Writes are insert-or-skip against the (game_id, details) unique
constraint.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.notifications import PostedUpdate, PostType
from ..logging import logger
from ..utils.datetime_utils import now_utc

FINAL_DETAILS = "Final"
FORECAST_DETAILS_PREFIX = "Forecast_Inning_"


class LedgerWriteError(RuntimeError):
    """Raised when a decision could not be recorded."""


def forecast_details(inning: int) -> str:
    return f"{FORECAST_DETAILS_PREFIX}{inning}"


def _dialect_insert(session: Session):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise LedgerWriteError(f"Unsupported database dialect for ledger writes: {dialect}")


class IdempotencyLedger:
    def __init__(self, session: Session) -> None:
        self.session = session

    def has_recorded(self, game_id: int, details: str) -> bool:
        """Whether a decision exists for (game, details).

        A failed read answers True.
        """
        stmt = (
            select(PostedUpdate.id)
            .where(PostedUpdate.game_id == game_id, PostedUpdate.details == details)
            .limit(1)
        )
        try:
            with self.session.begin_nested():
                return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as exc:
            logger.error(
                "ledger_check_failed",
                game_id=game_id,
                details=details,
                error=str(exc),
            )
            return True

    def record(
        self,
        game_id: int,
        kind: PostType | str,
        details: str,
        score_snapshot: str | None = None,
    ) -> bool:
        """Record a decision; returns False if one already existed."""
        post_type = kind.value if isinstance(kind, PostType) else kind
        insert = _dialect_insert(self.session)
        stmt = (
            insert(PostedUpdate)
            .values(
                game_id=game_id,
                post_type=post_type,
                details=details,
                score_snapshot=score_snapshot,
                created_at=now_utc(),
            )
            .on_conflict_do_nothing(index_elements=["game_id", "details"])
        )
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error(
                "ledger_record_failed",
                game_id=game_id,
                post_type=post_type,
                details=details,
                error=str(exc),
            )
            raise LedgerWriteError(f"Could not record {post_type} for game {game_id}") from exc

        inserted = result.rowcount == 1
        if inserted:
            logger.info(
                "ledger_recorded",
                game_id=game_id,
                post_type=post_type,
                details=details,
                score_snapshot=score_snapshot,
            )
        else:
            logger.info("ledger_record_exists", game_id=game_id, details=details)
        return inserted

    def last_forecast_snapshot(self, game_id: int) -> str | None:
        """Score snapshot stored with the most recent forecast for a game."""
        stmt = (
            select(PostedUpdate.score_snapshot)
            .where(
                PostedUpdate.game_id == game_id,
                PostedUpdate.post_type == PostType.forecast.value,
            )
            .order_by(PostedUpdate.created_at.desc(), PostedUpdate.id.desc())
            .limit(1)
        )
        try:
            with self.session.begin_nested():
                return self.session.execute(stmt).scalar()
        except SQLAlchemyError as exc:
            logger.warning("ledger_snapshot_read_failed", game_id=game_id, error=str(exc))
            return None
