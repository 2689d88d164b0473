"""Bearer-token authentication for the cron trigger endpoints."""

from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import settings
from ..logging import logger

# auto_error=False so every failure returns the same 401 body
BEARER = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_cron_secret(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(BEARER),
) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>``.

    Uses constant-time comparison. Without a configured secret the
    endpoints stay open outside production only; production refuses to
    start without one.
    """
    client_ip = request.client.host if request.client else "unknown"

    if not settings.cron_secret:
        if settings.environment == "production":
            logger.error("cron_secret_missing", path=request.url.path)
            raise _unauthorized()
        logger.warning("cron_secret_not_configured", path=request.url.path)
        return

    if credentials is None or not credentials.credentials:
        logger.warning("cron_auth_missing", client_ip=client_ip, path=request.url.path)
        raise _unauthorized()

    if not secrets.compare_digest(credentials.credentials, settings.cron_secret):
        logger.warning("cron_auth_invalid", client_ip=client_ip, path=request.url.path)
        raise _unauthorized()
