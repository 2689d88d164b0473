"""MLB Stats API feed helpers (daily schedule and per-game live feed).

The schedule gives every game's status and score; in-progress games are
then enriched from the live feed, which carries the authoritative inning
and inning state.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import settings
from ..logging import logger
from ..models import GameSnapshot, GameState
from ..utils.parsing import parse_int
from .mlb_constants import (
    MLB_FINAL_STATES,
    MLB_LIVE_FEED_PATH,
    MLB_NO_RESULT_PREFIXES,
    MLB_NOT_STARTED_STATES,
    MLB_RETRYABLE_STATUS_CODES,
    MLB_SCHEDULE_PATH,
    MLB_SPORT_ID,
)


class MLBFeedError(RuntimeError):
    """Raised when the game-data provider cannot return a usable payload."""


class RetryableFeedError(MLBFeedError):
    """Transient provider failure (timeouts, 5xx, 429)."""


def classify_status(abstract_state: str | None, detailed_state: str | None) -> GameState:
    detailed = (detailed_state or "").strip()
    if detailed.startswith(MLB_NO_RESULT_PREFIXES):
        return "other"
    if any(detailed.startswith(state) for state in MLB_FINAL_STATES):
        return "final"
    abstract = (abstract_state or "").strip()
    if abstract == "Live":
        return "scheduled" if detailed in MLB_NOT_STARTED_STATES else "in_progress"
    if abstract == "Preview":
        return "scheduled"
    return "other"


def format_inning_state(inning_state: str | None, inning_ordinal: str | None) -> str:
    """Render provider linescore fields as "Top of the 7th"."""
    if inning_state and inning_ordinal:
        return f"{inning_state} of the {inning_ordinal}"
    return "Pre-Game"


def parse_schedule_game(raw: dict[str, Any]) -> GameSnapshot | None:
    """Build a snapshot from one schedule entry; None when it is unusable."""
    game_id = parse_int(raw.get("gamePk"))
    teams = raw.get("teams") or {}
    home = teams.get("home") or {}
    away = teams.get("away") or {}
    home_team = home.get("team") or {}
    away_team = away.get("team") or {}
    home_id = parse_int(home_team.get("id"))
    away_id = parse_int(away_team.get("id"))
    if game_id is None or home_id is None or away_id is None:
        logger.warning("mlb_schedule_game_unparseable", game_pk=raw.get("gamePk"))
        return None

    status = raw.get("status") or {}
    linescore = raw.get("linescore") or {}
    return GameSnapshot(
        game_id=game_id,
        status=classify_status(status.get("abstractGameState"), status.get("detailedState")),
        detailed_state=status.get("detailedState") or "",
        home_id=home_id,
        away_id=away_id,
        home_name=home_team.get("name") or str(home_id),
        away_name=away_team.get("name") or str(away_id),
        home_score=parse_int(home.get("score")) or 0,
        away_score=parse_int(away.get("score")) or 0,
        inning=parse_int(linescore.get("currentInning")) or 0,
        inning_state=format_inning_state(
            linescore.get("inningState"), linescore.get("currentInningOrdinal")
        ),
    )


def apply_live_feed(game: GameSnapshot, payload: dict[str, Any]) -> GameSnapshot:
    """Overlay live-feed linescore data on a schedule snapshot."""
    live_data = payload.get("liveData") or {}
    linescore = live_data.get("linescore") or {}
    if not linescore:
        raise MLBFeedError(f"Live feed for game {game.game_id} has no linescore")

    line_teams = linescore.get("teams") or {}
    home_runs = parse_int((line_teams.get("home") or {}).get("runs"))
    away_runs = parse_int((line_teams.get("away") or {}).get("runs"))

    status = (payload.get("gameData") or {}).get("status") or {}
    detailed = status.get("detailedState") or game.detailed_state

    return game.model_copy(
        update={
            "status": classify_status(status.get("abstractGameState"), detailed)
            if status
            else game.status,
            "detailed_state": detailed,
            "home_score": home_runs if home_runs is not None else game.home_score,
            "away_score": away_runs if away_runs is not None else game.away_score,
            "inning": parse_int(linescore.get("currentInning")) or game.inning,
            "inning_state": format_inning_state(
                linescore.get("inningState"), linescore.get("currentInningOrdinal")
            ),
        }
    )


class MLBLiveFeedClient:
    """Client for the MLB Stats API schedule and live-feed endpoints."""

    def __init__(self, client: httpx.Client | None = None) -> None:
        config = settings.provider_config
        self._base_url = config.base_url.rstrip("/")
        self.client = client or httpx.Client(
            timeout=config.request_timeout_seconds,
            headers={"User-Agent": config.user_agent},
        )

    def close(self) -> None:
        self.client.close()

    @retry(
        retry=retry_if_exception_type(RetryableFeedError),
        stop=stop_after_attempt(settings.provider_config.retry_attempts),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self.client.get(url, params=params)
        except httpx.TransportError as exc:
            logger.warning("mlb_request_transport_error", url=url, error=str(exc))
            raise RetryableFeedError(f"Transport error fetching {url}: {exc}") from exc

        if response.status_code in MLB_RETRYABLE_STATUS_CODES:
            logger.warning("mlb_request_retryable_status", url=url, status=response.status_code)
            raise RetryableFeedError(f"{url} returned {response.status_code}")
        if response.status_code != 200:
            logger.warning(
                "mlb_request_failed",
                url=url,
                status=response.status_code,
                body=response.text[:200],
            )
            raise MLBFeedError(f"{url} returned {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise MLBFeedError(f"{url} returned invalid JSON") from exc

    def fetch_schedule(self, day: date) -> list[GameSnapshot]:
        """Fetch every game scheduled on ``day`` with current status and score."""
        logger.info("mlb_schedule_fetch", date=str(day))
        payload = self._get_json(
            MLB_SCHEDULE_PATH,
            params={"sportId": MLB_SPORT_ID, "date": day.isoformat(), "hydrate": "linescore"},
        )

        games: list[GameSnapshot] = []
        for date_entry in payload.get("dates") or []:
            for raw in date_entry.get("games") or []:
                game = parse_schedule_game(raw)
                if game is not None:
                    games.append(game)

        logger.info("mlb_schedule_parsed", date=str(day), games=len(games))
        return games

    def fetch_live_snapshot(self, game: GameSnapshot) -> GameSnapshot:
        """Return ``game`` refreshed with inning detail from its live feed."""
        payload = self._get_json(MLB_LIVE_FEED_PATH.format(game_id=game.game_id))
        return apply_live_feed(game, payload)
