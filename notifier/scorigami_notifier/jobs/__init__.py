"""Jobs run by the cron trigger endpoints."""

from .check_games import GamePoller, PollSummary, check_games
from .process_queue import drain_one

__all__ = ["GamePoller", "PollSummary", "check_games", "drain_one"]
