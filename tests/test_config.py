"""Tests for settings loading."""

from __future__ import annotations

import pytest

from trendpost.config import FeedSource, Settings, get_settings
from trendpost.storage.models import Platform


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in [
        "ANTHROPIC_API_KEY",
        "SERPAPI_KEY",
        "WECHAT_APP_ID",
        "WECHAT_APP_SECRET",
        "XHS_COOKIE",
        "GOOGLE_DOCS_CREDENTIALS",
        "GOOGLE_DOCS_FOLDER_ID",
        "TRENDPOST_XHS_COOKIE",
        "TRENDPOST_PENDING_TREND_LIMIT",
        "TRENDPOST_RSS_FEEDS",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings()
    assert settings.campaign_platforms == [Platform.WECHAT, Platform.XHS]
    assert settings.pending_trend_limit == 5
    assert settings.provider_cache_seconds == 60.0
    assert settings.db_path.is_absolute()


def test_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRENDPOST_PENDING_TREND_LIMIT", "3")
    monkeypatch.setenv(
        "TRENDPOST_RSS_FEEDS", '[{"url": "https://example.com/rss", "name": "Example"}]'
    )
    settings = get_settings()
    assert settings.pending_trend_limit == 3
    assert settings.rss_feeds == [FeedSource(url="https://example.com/rss", name="Example")]


def test_unprefixed_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.setenv("XHS_COOKIE", "session=abc")
    settings = get_settings()
    assert settings.anthropic_api_key == "sk-test"
    assert settings.xhs_cookie == "session=abc"


def test_is_set_ignores_whitespace() -> None:
    settings = Settings(wechat_app_id="  ", wechat_app_secret="secret")
    assert settings.is_set("wechat_app_id") is False
    assert settings.is_set("wechat_app_secret") is True
