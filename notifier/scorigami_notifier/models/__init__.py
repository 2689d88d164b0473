"""Common typed models shared across the notifier."""

from .schemas import (
    Classification,
    ClassificationKind,
    DeliveryResult,
    DrainOutcome,
    ForecastOutcome,
    ForecastResult,
    Franchise,
    FranchiseHit,
    GameSnapshot,
    GameState,
    HistoricalRecord,
    LeagueCheck,
    ScoreKey,
)

__all__ = [
    "GameSnapshot",
    "GameState",
    "ScoreKey",
    "Franchise",
    "HistoricalRecord",
    "LeagueCheck",
    "FranchiseHit",
    "Classification",
    "ClassificationKind",
    "ForecastOutcome",
    "ForecastResult",
    "DeliveryResult",
    "DrainOutcome",
]
