"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from trendpost.config import Settings
from trendpost.content.base import BaseGenerator, GeneratedPost, GenerationResult
from trendpost.llm.client import ClaudeClient
from trendpost.storage.content import ContentStore
from trendpost.storage.database import _engines
from trendpost.storage.models import Platform
from trendpost.storage.trends import TrendStore


@pytest.fixture(autouse=True)
def _clear_engines():
    """Each test gets its own SQLite file; drop cached engines afterwards."""
    yield
    _engines.clear()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create test settings with temporary paths and no publishing credentials."""
    return Settings(
        anthropic_api_key="test-key-not-real",
        model="claude-sonnet-4-20250514",
        max_tokens=1024,
        temperature=0.7,
        db_path=tmp_path / "test.db",
    )


@pytest.fixture
def configured_settings(settings: Settings) -> Settings:
    """Settings with the WeChat credentials filled in."""
    settings.wechat_app_id = "wx-app"
    settings.wechat_app_secret = "wx-secret"
    return settings


@pytest.fixture
def trend_store(settings: Settings) -> TrendStore:
    return TrendStore(settings.db_path)


@pytest.fixture
def content_store(settings: Settings) -> ContentStore:
    return ContentStore(settings.db_path)


@pytest.fixture
def mock_claude_client(settings: Settings) -> ClaudeClient:
    """Create a ClaudeClient with a mocked Anthropic SDK."""
    client = ClaudeClient(settings)
    # Replace the internal Anthropic client with a mock
    mock_anthropic = MagicMock()
    client._client = mock_anthropic
    return client


class FakeClock:
    """Monotonic clock the test can move forward."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class FakeGenerator(BaseGenerator):
    """Returns canned posts; platforms listed in ``fail`` are reported as failures."""

    def __init__(self, fail: set[Platform] | None = None, error: Exception | None = None) -> None:
        self.fail = fail or set()
        self.error = error
        self.calls: list[tuple[str, list[Platform]]] = []

    def generate(self, topic: str, platforms: list[Platform]) -> GenerationResult:
        self.calls.append((topic, list(platforms)))
        if self.error is not None:
            raise self.error
        result = GenerationResult(topic=topic)
        for platform in platforms:
            if platform in self.fail:
                result.failures[platform] = "Expecting value: line 1 column 1 (char 0)"
                continue
            result.posts.append(make_post(platform, title=f"{topic} for {platform.value}"))
        return result


def make_post(
    platform: Platform = Platform.WECHAT,
    title: str = "AI Regulation Explained",
    body: str = "What the new rules mean for you.",
    hashtags: str | None = None,
) -> GeneratedPost:
    return GeneratedPost(platform=platform, title=title, body=body, hashtags=hashtags)


def make_mock_response(text: str, input_tokens: int = 100, output_tokens: int = 200):
    """Helper to create a mock Anthropic API response."""
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text=text)]
    mock_response.usage.input_tokens = input_tokens
    mock_response.usage.output_tokens = output_tokens
    return mock_response
