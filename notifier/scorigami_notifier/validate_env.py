"""Fail-fast environment validation for the notifier service.

Runs before settings are built; a misconfigured deployment refuses to
start.
"""

from __future__ import annotations

import os
from functools import lru_cache
from urllib.parse import urlparse

ALLOWED_ENVIRONMENTS = {"development", "staging", "production"}

_TRUTHY = {"1", "true", "yes", "on"}


def require_env(name: str) -> str:
    """Fetch an environment variable or raise RuntimeError if missing."""
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"{name} is required and must be set before startup.")
    return value.strip()


def validate_environment_value(environment: str) -> None:
    """Ensure ENVIRONMENT is one of the allowed values."""
    if environment not in ALLOWED_ENVIRONMENTS:
        allowed = ", ".join(sorted(ALLOWED_ENVIRONMENTS))
        raise RuntimeError(f"ENVIRONMENT must be one of: {allowed}.")


def validate_non_local_url(name: str, value: str) -> None:
    """Ensure a URL does not point to localhost in production."""
    parsed = urlparse(value)
    host = parsed.hostname
    if not host:
        raise RuntimeError(f"{name} must be a valid URL (missing hostname).")
    if host in {"localhost", "127.0.0.1"}:
        raise RuntimeError(f"{name} must not point to localhost in production.")


def validate_database_credentials(value: str) -> None:
    """Ensure DATABASE_URL does not use default credentials in production."""
    parsed = urlparse(value)
    if parsed.username == "postgres" and parsed.password == "postgres":
        raise RuntimeError(
            "DATABASE_URL must not use default postgres credentials in production."
        )


def posting_enabled() -> bool:
    return os.getenv("ENABLE_POSTING", "").strip().lower() in _TRUTHY


def _validate_social_credentials() -> None:
    if os.getenv("BSKY_HANDLE") and os.getenv("BSKY_APP_PASSWORD"):
        return
    raise RuntimeError(
        "ENABLE_POSTING requires BSKY_HANDLE and BSKY_APP_PASSWORD."
    )


@lru_cache(maxsize=1)
def validate_env() -> None:
    """Validate required environment variables before the service starts.

    Production additionally demands a cron secret (the trigger endpoints
    are public) and, when posting is switched on, social credentials.
    """
    environment = require_env("ENVIRONMENT")
    validate_environment_value(environment)

    database_url = require_env("DATABASE_URL")

    if environment == "production":
        validate_non_local_url("DATABASE_URL", database_url)
        validate_database_credentials(database_url)
        require_env("CRON_SECRET")

        if posting_enabled():
            _validate_social_credentials()
