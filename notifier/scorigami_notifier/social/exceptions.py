"""Custom exceptions for social delivery."""

from __future__ import annotations


class SocialRateLimitError(RuntimeError):
    def __init__(self, message: str, retry_after_seconds: int | None = None) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class SocialPostError(RuntimeError):
    """Raised when the channel rejects a post for any reason other than rate limiting."""
