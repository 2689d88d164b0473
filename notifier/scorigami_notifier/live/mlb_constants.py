"""Constants for the MLB Stats API game feeds."""

from __future__ import annotations

MLB_SPORT_ID = 1

MLB_SCHEDULE_PATH = "/api/v1/schedule/games/"
MLB_LIVE_FEED_PATH = "/api/v1.1/game/{game_id}/feed/live"

# detailedState values that mean the score is official
MLB_FINAL_STATES = frozenset({"Final", "Game Over", "Completed Early"})

# Live abstract state, but no pitch thrown yet
MLB_NOT_STARTED_STATES = frozenset({"Warmup", "Pre-Game", "Delayed Start"})

# Suspended/postponed games report abstractGameState "Final" with no result
MLB_NO_RESULT_PREFIXES = ("Postponed", "Cancelled", "Suspended")

MLB_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
