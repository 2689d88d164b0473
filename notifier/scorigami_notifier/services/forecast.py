"""In-progress forecast: chance a lopsided game ends in a franchise scorigami.

Remaining scoring is modelled as a Poisson process. With ``r`` innings
left and an average of ``a`` runs per team per inning, the expected number
of additional runs (both teams) is ``lambda = r * a * 2``. For each total
``k`` of additional runs, all ``k + 1`` ways of splitting them between the
teams are treated as equally likely, so one final score has probability
``P(k) / (k + 1)``. Every reachable final is tested for each side against
that franchise's history.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from typing import Literal

from ..config import ForecastConfig, settings
from ..logging import logger
from ..models import Franchise, ForecastOutcome, ForecastResult, GameSnapshot, ScoreKey

# (franchise, oriented score) -> has the franchise recorded this score?
FranchiseHistoryCheck = Callable[[Franchise, ScoreKey], bool]

Side = Literal["home", "away"]


class ForecastCache:
    """Memo of franchise-history answers for a single forecast call.

    One instance per forecast; never stored on a module or reused across
    invocations.
    """

    def __init__(self) -> None:
        self._seen: dict[tuple[Side, str, int, int], bool] = {}
        self.lookups = 0

    def has_occurred(
        self,
        side: Side,
        franchise: Franchise,
        score_key: ScoreKey,
        check: FranchiseHistoryCheck,
    ) -> bool:
        key = (side, franchise.franchise_id, score_key.first, score_key.second)
        if key not in self._seen:
            self.lookups += 1
            self._seen[key] = check(franchise, score_key)
        return self._seen[key]

    def __len__(self) -> int:
        return len(self._seen)


def poisson_pmf(lam: float, k: int) -> float:
    """P(X = k) for X ~ Poisson(lam), computed in log space."""
    if lam < 0 or k < 0:
        return 0.0
    if lam == 0:
        return 1.0 if k == 0 else 0.0
    return math.exp(k * math.log(lam) - lam - math.lgamma(k + 1))


def innings_remaining(game: GameSnapshot, config: ForecastConfig | None = None) -> int:
    config = config or settings.forecast_config
    return config.regulation_innings - game.inning


def expected_additional_runs(remaining: int, config: ForecastConfig | None = None) -> float:
    config = config or settings.forecast_config
    return remaining * config.avg_runs_per_inning_per_team * 2


def should_forecast(game: GameSnapshot, config: ForecastConfig | None = None) -> bool:
    """Only late, lopsided, in-progress games are worth forecasting."""
    config = config or settings.forecast_config
    return (
        game.is_in_progress
        and game.inning >= config.min_inning
        and max(game.home_score, game.away_score) >= config.blowout_runs
    )


def enumerate_outcomes(
    game: GameSnapshot,
    config: ForecastConfig | None = None,
) -> Iterator[tuple[int, int, int, float]]:
    """Yield ``(k, final_away, final_home, probability)`` for every split.

    Stops once P(k) has fallen below ``min_probability`` past the mode,
    or at ``max_additional_runs``.
    """
    config = config or settings.forecast_config
    remaining = innings_remaining(game, config)
    if remaining <= 0:
        return
    lam = expected_additional_runs(remaining, config)

    for k in range(config.max_additional_runs + 1):
        p_k = poisson_pmf(lam, k)
        if p_k < config.min_probability:
            if k >= lam:
                break
            continue
        split_probability = p_k / (k + 1)
        for away_runs in range(k + 1):
            home_runs = k - away_runs
            yield k, game.away_score + away_runs, game.home_score + home_runs, split_probability


def forecast_franchise_scorigami(
    game: GameSnapshot,
    home: Franchise,
    away: Franchise,
    check: FranchiseHistoryCheck,
    config: ForecastConfig | None = None,
    cache: ForecastCache | None = None,
) -> ForecastResult | None:
    """Probability that ``game`` ends in a score new to either franchise.

    Returns None when no innings remain or no reachable final is new.
    """
    config = config or settings.forecast_config
    remaining = innings_remaining(game, config)
    if remaining <= 0:
        return None

    cache = cache if cache is not None else ForecastCache()
    lam = expected_additional_runs(remaining, config)
    total_chance = 0.0
    most_likely: ForecastOutcome | None = None

    sides: tuple[tuple[Side, Franchise, str], ...] = (
        ("home", home, game.home_name),
        ("away", away, game.away_name),
    )

    for _k, final_away, final_home, probability in enumerate_outcomes(game, config):
        for side, franchise, team_name in sides:
            if franchise.is_fallback:
                continue
            if side == "home":
                oriented = ScoreKey.oriented(final_home, final_away)
            else:
                oriented = ScoreKey.oriented(final_away, final_home)
            if cache.has_occurred(side, franchise, oriented, check):
                continue

            total_chance += probability
            if most_likely is None or probability > most_likely.probability:
                most_likely = ForecastOutcome(
                    team_name=team_name,
                    team_score=oriented.first,
                    opponent_score=oriented.second,
                    probability=probability,
                )

    logger.info(
        "forecast_computed",
        game_id=game.game_id,
        inning=game.inning,
        innings_remaining=remaining,
        lambda_=round(lam, 3),
        total_chance=round(total_chance, 6),
        history_lookups=cache.lookups,
    )

    if total_chance <= 0:
        return None
    return ForecastResult(
        total_chance=total_chance,
        most_likely=most_likely,
        lambda_=lam,
        innings_remaining=remaining,
    )
