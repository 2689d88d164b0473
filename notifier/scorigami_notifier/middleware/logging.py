"""Access-log middleware for the trigger endpoints."""

from __future__ import annotations

import json
import logging
import time
from typing import Callable

from fastapi import Request


class StructuredLoggingMiddleware:
    """Log one JSON line per HTTP request."""

    def __init__(self, app: Callable) -> None:
        self.app = app
        self.logger = logging.getLogger("scorigami_notifier.access")

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        request = Request(scope, receive=receive)

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                # Never log the Authorization header; it carries the cron secret
                self.logger.info(
                    json.dumps(
                        {
                            "method": request.method,
                            "path": request.url.path,
                            "status_code": message["status"],
                            "client_ip": request.client.host if request.client else None,
                            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                            "user_agent": request.headers.get("user-agent"),
                        }
                    )
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)
