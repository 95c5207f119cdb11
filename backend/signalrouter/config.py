"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings."""

    app_name: str = "signalrouter"
    log_level: str = "INFO"

    route_warnings: bool = False

    stripe_webhook_secret: str | None = None
    stripe_signature_tolerance_seconds: int = 300

    github_status_url: str | None = None
    openai_status_url: str | None = None
    status_fetch_timeout_seconds: float = 10.0

    pagerduty_routing_key: str | None = None
    pagerduty_events_url: str = "https://events.pagerduty.com/v2/enqueue"
    delivery_timeout_seconds: float = 5.0

    default_query_limit: int = 50
    max_query_limit: int = 500

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""

    return Settings()


def package_root() -> Path:
    """Return the signalrouter package directory."""

    return Path(__file__).resolve().parent
