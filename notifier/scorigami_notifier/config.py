"""
Typed settings for the scorigami notifier service.

Uses Pydantic Settings to load configuration from environment variables
with validation and type safety. For local development the repository
root .env file is read as well.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .validate_env import validate_env


class ProviderConfig(BaseModel):
    base_url: str = Field(default="https://statsapi.mlb.com")
    request_timeout_seconds: int = 15
    retry_attempts: int = 3
    user_agent: str = "scorigami-notifier/1.0"


class ForecastConfig(BaseModel):
    avg_runs_per_inning_per_team: float = Field(default=0.5)
    regulation_innings: int = Field(default=9)
    # Upper bound on additional runs enumerated for the rest of the game
    max_additional_runs: int = Field(default=20)
    # Stop enumerating once P(k) falls below this
    min_probability: float = Field(default=1e-5)
    min_inning: int = Field(default=6)
    blowout_runs: int = Field(default=10)


class NotificationConfig(BaseModel):
    # Finals with fewer combined runs are recorded but never posted
    min_combined_runs: int = Field(default=3)
    max_chars: int = Field(default=300)
    include_hashtags: bool = Field(default=True)
    league_label: str = Field(default="MLB")


class QueueConfig(BaseModel):
    expiration_hours: float = Field(default=2.0)


class HistoryFilterConfig(BaseModel):
    """Which historical records count as "history".

    The historical record includes Negro League seasons; they only take
    part in uniqueness checks when ``include_negro_leagues`` is set.
    """

    include_negro_leagues: bool = Field(default=False)
    game_types: list[str] | None = Field(default=None)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    In a deployment the variables are injected by the platform; locally
    they may come from the repository root .env file.
    """
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="allow",
    )

    database_url: str = Field(..., alias="DATABASE_URL")

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_async_to_sync(cls, v: str) -> str:
        """
        Convert asyncpg URLs to psycopg URLs.

        The service runs synchronous SQLAlchemy sessions; a shared .env may
        still carry the async driver name.
        """
        if isinstance(v, str) and "asyncpg" in v:
            return v.replace("asyncpg", "psycopg")
        return v

    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str | None = Field(None, alias="LOG_LEVEL")
    sql_echo: bool = Field(False, alias="SQL_ECHO")

    cron_secret: str | None = Field(None, alias="CRON_SECRET")
    enable_posting: bool = Field(False, alias="ENABLE_POSTING")
    bsky_handle: str | None = Field(None, alias="BSKY_HANDLE")
    bsky_app_password: str | None = Field(None, alias="BSKY_APP_PASSWORD")

    provider_config: ProviderConfig = Field(default_factory=ProviderConfig)
    forecast_config: ForecastConfig = Field(default_factory=ForecastConfig)
    notification_config: NotificationConfig = Field(default_factory=NotificationConfig)
    queue_config: QueueConfig = Field(default_factory=QueueConfig)
    history_filter: HistoryFilterConfig = Field(default_factory=HistoryFilterConfig)

    queue_expiration_hours_override: float | None = Field(None, alias="QUEUE_EXPIRATION_HOURS")
    min_combined_runs_override: int | None = Field(None, alias="MIN_COMBINED_RUNS")
    include_negro_leagues_override: bool | None = Field(None, alias="INCLUDE_NEGRO_LEAGUES")

    @model_validator(mode="after")
    def _apply_overrides(self) -> Settings:
        """
        Allow flat env vars to override nested config without requiring
        double-underscore syntax.
        """
        if self.queue_expiration_hours_override is not None:
            self.queue_config.expiration_hours = self.queue_expiration_hours_override
        if self.min_combined_runs_override is not None:
            self.notification_config.min_combined_runs = self.min_combined_runs_override
        if self.include_negro_leagues_override is not None:
            self.history_filter.include_negro_leagues = self.include_negro_leagues_override
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Settings are cached to avoid re-parsing environment variables
    on every access.
    """
    validate_env()
    return Settings()


# Global settings instance - import this in other modules
settings = get_settings()
