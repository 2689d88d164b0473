"""Historical record tables: game logs and team lineage.

These tables are loaded and maintained outside this service. They are
mapped here for querying only; migrations never touch them.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class GameLog(Base):
    """One completed game from the long-lived historical record.

    ``date`` is stored as a YYYYMMDD integer, which sorts chronologically.
    Team columns hold franchise-era team codes (e.g. ``BRO`` for the
    Brooklyn years of the Dodgers).
    """

    __tablename__ = "gamelogs"
    __table_args__ = {"info": {"managed_externally": True}}

    game_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    game_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    visitor_team: Mapped[str] = mapped_column(String(10), nullable=False)
    home_team: Mapped[str] = mapped_column(String(10), nullable=False)
    visitor_score: Mapped[int] = mapped_column(Integer, nullable=False)
    home_score: Mapped[int] = mapped_column(Integer, nullable=False)
    innings: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_negro_league: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    source: Mapped[str | None] = mapped_column(String(40), nullable=True)


class Team(Base):
    """Team-era rows; ``franchise`` groups eras into one continuous club."""

    __tablename__ = "teams"

    team_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    franchise: Mapped[str | None] = mapped_column(String(10), nullable=True, index=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    first: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_negro_league: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


Index("idx_gamelogs_home_scores", GameLog.home_team, GameLog.home_score, GameLog.visitor_score)
Index("idx_gamelogs_visitor_scores", GameLog.visitor_team, GameLog.visitor_score, GameLog.home_score)
