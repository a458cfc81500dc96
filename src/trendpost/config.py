"""Configuration loading from environment variables with validation."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from trendpost.storage.models import Platform

# Anchor all paths to the project root (two levels up from this file's package)
_PROJECT_DIR = Path(__file__).resolve().parent.parent.parent

# Legacy variable names honoured without the TRENDPOST_ prefix
_UNPREFIXED_ENV = {
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "serpapi_key": "SERPAPI_KEY",
    "wechat_app_id": "WECHAT_APP_ID",
    "wechat_app_secret": "WECHAT_APP_SECRET",
    "xhs_cookie": "XHS_COOKIE",
    "google_docs_credentials": "GOOGLE_DOCS_CREDENTIALS",
    "google_docs_folder_id": "GOOGLE_DOCS_FOLDER_ID",
}


class FeedSource(BaseModel):
    """An RSS/Atom feed to poll for topics."""

    url: str
    name: str


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRENDPOST_",
        case_sensitive=False,
    )

    # Anthropic
    anthropic_api_key: str = ""
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 2048
    temperature: float = 0.8
    llm_timeout_seconds: float = 60.0

    # Trend discovery
    serpapi_key: str = ""
    trends_geo: str = "US"
    http_timeout_seconds: float = 30.0
    max_items_per_feed: int = 20
    rss_feeds: list[FeedSource] = []

    # Publishing credentials
    wechat_app_id: str = ""
    wechat_app_secret: str = ""
    xhs_cookie: str = ""
    google_docs_credentials: str = ""  # service-account JSON or a path to it
    google_docs_folder_id: str = ""

    # Campaigns
    campaign_platforms: list[Platform] = [Platform.WECHAT, Platform.XHS]
    pending_trend_limit: int = 5
    provider_cache_seconds: float = 60.0

    # Storage (absolute, anchored to the project root)
    db_path: Path = _PROJECT_DIR / "data" / "trendpost.db"

    # Logging
    log_level: str = "INFO"

    def is_set(self, key: str) -> bool:
        """Return True if the named field holds a non-blank value."""
        value = getattr(self, key, "")
        return bool(str(value or "").strip())


def get_settings() -> Settings:
    """Load settings from environment and .env file."""
    # Load .env from the project root regardless of cwd
    load_dotenv(_PROJECT_DIR / ".env")
    overrides = {
        field: os.environ[env_name]
        for field, env_name in _UNPREFIXED_ENV.items()
        if os.getenv(env_name)
    }
    return Settings(**overrides)
