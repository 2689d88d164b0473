"""Composing and delivering social posts."""

from .composer import compose_final, compose_forecast, format_header, ordinal
from .delivery import SocialPoster
from .exceptions import SocialPostError, SocialRateLimitError

__all__ = [
    "compose_final",
    "compose_forecast",
    "format_header",
    "ordinal",
    "SocialPoster",
    "SocialPostError",
    "SocialRateLimitError",
]
