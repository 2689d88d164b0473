"""Typed models shared across the notifier."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


GameState = Literal["scheduled", "in_progress", "final", "other"]
Orientation = Literal["traditional", "oriented"]


class GameSnapshot(BaseModel):
    """Point-in-time view of one game, rebuilt on every poll."""

    model_config = ConfigDict(frozen=True)

    game_id: int
    status: GameState
    detailed_state: str = ""
    home_id: int
    away_id: int
    home_name: str
    away_name: str
    home_score: int = Field(default=0, ge=0)
    away_score: int = Field(default=0, ge=0)
    inning: int = Field(default=0, ge=0)
    inning_state: str = "Pre-Game"

    @property
    def is_final(self) -> bool:
        return self.status == "final"

    @property
    def is_in_progress(self) -> bool:
        return self.status == "in_progress"

    @property
    def is_tie(self) -> bool:
        return self.home_score == self.away_score

    @property
    def total_runs(self) -> int:
        return self.home_score + self.away_score

    @property
    def winner_is_home(self) -> bool:
        return self.home_score > self.away_score

    @property
    def score_snapshot(self) -> str:
        """Away-first score string stored alongside ledger records."""
        return f"{self.away_score}-{self.home_score}"

    def final_score_key(self) -> ScoreKey:
        return ScoreKey.traditional(self.home_score, self.away_score)

    def oriented_key(self, for_home: bool) -> ScoreKey:
        if for_home:
            return ScoreKey.oriented(self.home_score, self.away_score)
        return ScoreKey.oriented(self.away_score, self.home_score)


@dataclass(frozen=True)
class ScoreKey:
    """A pair of run totals used to look up history.

    ``traditional`` keys are (winner, loser) and ignore who was home;
    ``oriented`` keys are (this team, opponent) and are how a single
    franchise's record is keyed.
    """

    first: int
    second: int
    orientation: Orientation = "traditional"

    def __post_init__(self) -> None:
        if self.first < 0 or self.second < 0:
            raise ValueError(f"Scores must be non-negative: {self.first}-{self.second}")
        if self.orientation == "traditional" and self.first < self.second:
            raise ValueError(
                f"Traditional score keys are winner-first: {self.first}-{self.second}"
            )

    @classmethod
    def traditional(cls, a: int, b: int) -> ScoreKey:
        return cls(max(a, b), min(a, b), "traditional")

    @classmethod
    def oriented(cls, team_runs: int, opponent_runs: int) -> ScoreKey:
        return cls(team_runs, opponent_runs, "oriented")

    @property
    def is_tie(self) -> bool:
        return self.first == self.second

    def as_traditional(self) -> ScoreKey:
        return ScoreKey.traditional(self.first, self.second)

    def __str__(self) -> str:
        return f"{self.first}-{self.second}"


@dataclass(frozen=True)
class Franchise:
    """Canonical identity of a club across relocations and renames."""

    franchise_id: str
    team_codes: tuple[str, ...]
    name: str
    short_name: str
    hashtag: str | None = None
    is_fallback: bool = False


@dataclass(frozen=True)
class HistoricalRecord:
    occurrences: int = 0
    last_date: date | None = None
    last_home_team: str | None = None
    last_visitor_team: str | None = None

    @property
    def has_occurred(self) -> bool:
        return self.occurrences > 0


@dataclass(frozen=True)
class LeagueCheck:
    is_new: bool
    new_count: int | None = None


class ClassificationKind(str, Enum):
    true_unique = "true_unique"
    franchise_unique = "franchise_unique"
    tie = "tie"
    not_unique = "not_unique"


@dataclass(frozen=True)
class FranchiseHit:
    franchise: Franchise
    team_name: str
    new_count: int


@dataclass(frozen=True)
class Classification:
    kind: ClassificationKind
    league_count: int | None = None
    franchise_hits: tuple[FranchiseHit, ...] = ()
    history: HistoricalRecord | None = None


@dataclass(frozen=True)
class ForecastOutcome:
    team_name: str
    team_score: int
    opponent_score: int
    probability: float

    @property
    def score(self) -> str:
        return f"{self.team_score}-{self.opponent_score}"


@dataclass(frozen=True)
class ForecastResult:
    total_chance: float
    most_likely: ForecastOutcome | None
    lambda_: float
    innings_remaining: int


class DeliveryResult(str, Enum):
    delivered = "delivered"
    rate_limited = "rate_limited"
    other_error = "other_error"


class DrainOutcome(str, Enum):
    empty = "empty"
    delivered = "delivered"
    discarded_stale = "discarded_stale"
    already_posted = "already_posted"
    retry_later = "retry_later"
    error = "error"
