"""Publish composed text to Bluesky.

``deliver`` never raises. Provider failures collapse into three outcomes
the callers act on: delivered, rate limited (queue it), or other error
(log and move on).
"""

from __future__ import annotations

from collections.abc import Callable

from atproto import Client
from atproto_client.exceptions import RequestErrorBase

from ..config import settings
from ..logging import logger
from ..models import DeliveryResult
from .exceptions import SocialPostError, SocialRateLimitError

RATE_LIMIT_STATUS = 429


def _retry_after(exc: RequestErrorBase) -> int | None:
    headers = getattr(exc.response, "headers", None) or {}
    for name in ("retry-after", "Retry-After", "ratelimit-reset", "RateLimit-Reset"):
        if name in headers:
            try:
                return int(headers[name])
            except (TypeError, ValueError):
                return None
    return None


class SocialPoster:
    """Posts to one Bluesky account, logging in on first use.

    With posting disabled every call is logged and reported as delivered
    without touching the network.
    """

    def __init__(
        self,
        enabled: bool | None = None,
        handle: str | None = None,
        app_password: str | None = None,
        client_factory: Callable[[], Client] = Client,
    ) -> None:
        self.enabled = settings.enable_posting if enabled is None else enabled
        self.handle = handle if handle is not None else settings.bsky_handle
        self.app_password = app_password if app_password is not None else settings.bsky_app_password
        self._client_factory = client_factory
        self._client: Client | None = None

    def _get_client(self) -> Client:
        if self._client is None:
            if not self.handle or not self.app_password:
                raise SocialPostError("Bluesky credentials are not configured")
            client = self._client_factory()
            try:
                client.login(self.handle, self.app_password)
            except RequestErrorBase as exc:
                self._raise_for_response(exc, "login")
            except Exception as exc:
                raise SocialPostError(f"Bluesky login failed: {exc}") from exc
            logger.info("social_login_ok", handle=self.handle)
            self._client = client
        return self._client

    @staticmethod
    def _raise_for_response(exc: RequestErrorBase, action: str) -> None:
        status_code = getattr(exc.response, "status_code", None)
        if status_code == RATE_LIMIT_STATUS:
            raise SocialRateLimitError(
                f"Bluesky {action} rate limited",
                retry_after_seconds=_retry_after(exc),
            ) from exc
        raise SocialPostError(f"Bluesky {action} failed (status {status_code}): {exc}") from exc

    def _send(self, text: str) -> None:
        client = self._get_client()
        try:
            client.send_post(text=text)
        except RequestErrorBase as exc:
            self._raise_for_response(exc, "post")
        except Exception as exc:
            raise SocialPostError(f"Bluesky post failed: {exc}") from exc

    def deliver(self, text: str) -> DeliveryResult:
        if not self.enabled:
            logger.info("post_simulated", text=text, chars=len(text))
            return DeliveryResult.delivered

        try:
            self._send(text)
        except SocialRateLimitError as exc:
            logger.warning(
                "post_rate_limited",
                retry_after_seconds=exc.retry_after_seconds,
                error=str(exc),
            )
            return DeliveryResult.rate_limited
        except SocialPostError as exc:
            logger.error("post_failed", error=str(exc))
            return DeliveryResult.other_error

        logger.info("post_delivered", chars=len(text))
        return DeliveryResult.delivered
