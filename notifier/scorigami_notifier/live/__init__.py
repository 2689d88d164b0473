"""Live game-data provider integrations."""

from .mlb import MLBFeedError, MLBLiveFeedClient

__all__ = ["MLBFeedError", "MLBLiveFeedClient"]
