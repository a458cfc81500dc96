"""Tests for post parsing and the Claude-backed content generator."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import httpx
import pytest
from anthropic import APIConnectionError
from pydantic import ValidationError

from trendpost.content.base import GeneratedPost
from trendpost.content.generator import ContentGenerator, parse_post
from trendpost.errors import UpstreamFailure
from trendpost.llm.client import ClaudeClient
from trendpost.storage.models import Platform
from tests.conftest import make_mock_response


def _post_json(**overrides) -> str:
    data = {
        "title": "AI Rules Are Here",
        "body": "Three things the new regulation changes.",
        "image_prompt": "A gavel on a circuit board",
    }
    data.update(overrides)
    return json.dumps(data)


class TestParsePost:
    def test_plain_json(self) -> None:
        post = parse_post(Platform.WECHAT, _post_json())
        assert post.platform is Platform.WECHAT
        assert post.title == "AI Rules Are Here"
        assert post.image_prompt == "A gavel on a circuit board"
        assert post.hashtags is None

    def test_code_fenced_json(self) -> None:
        post = parse_post(Platform.WECHAT, f"```json\n{_post_json()}\n```")
        assert post.title == "AI Rules Are Here"

    def test_nested_platform_key(self) -> None:
        response = json.dumps({"xhs_post": json.loads(_post_json(hashtags=["AI", "#law"]))})
        post = parse_post(Platform.XHS, response)
        assert post.title == "AI Rules Are Here"
        assert post.hashtags == "#AI #law"

    def test_not_json(self) -> None:
        with pytest.raises(ValueError):
            parse_post(Platform.WECHAT, "Sure! Here is your post: ...")

    def test_json_array_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_post(Platform.WECHAT, "[1, 2]")

    def test_missing_body_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_post(Platform.WECHAT, json.dumps({"title": "Only a title"}))


def test_generated_post_strips_whitespace() -> None:
    post = GeneratedPost(platform=Platform.XHS, title="  Hi  ", body=" Body ", hashtags=[])
    assert post.title == "Hi"
    assert post.body == "Body"
    assert post.hashtags is None


class TestContentGenerator:
    def test_generates_each_platform(self, mock_claude_client: ClaudeClient) -> None:
        mock_claude_client._client.messages.create.side_effect = [
            make_mock_response("Research briefing."),
            make_mock_response(_post_json(title="WeChat title")),
            make_mock_response(_post_json(title="XHS title", hashtags=["a", "b"])),
        ]

        result = ContentGenerator(mock_claude_client).generate(
            "AI Regulation", [Platform.WECHAT, Platform.XHS]
        )

        assert [p.platform for p in result.posts] == [Platform.WECHAT, Platform.XHS]
        assert result.posts[0].title == "WeChat title"
        assert result.posts[1].hashtags == "#a #b"
        assert result.failures == {}
        assert result.metadata["token_usage"]["total_input_tokens"] == 300

        # Research is fed into each platform prompt
        platform_call = mock_claude_client._client.messages.create.call_args_list[1]
        assert "Research briefing." in platform_call.kwargs["system"]

    def test_one_platform_failing_keeps_the_other(
        self, mock_claude_client: ClaudeClient
    ) -> None:
        mock_claude_client._client.messages.create.side_effect = [
            make_mock_response("Research briefing."),
            make_mock_response(_post_json(title="WeChat title")),
            make_mock_response("not json at all"),
        ]

        result = ContentGenerator(mock_claude_client).generate(
            "AI Regulation", [Platform.WECHAT, Platform.XHS]
        )

        assert [p.platform for p in result.posts] == [Platform.WECHAT]
        assert set(result.failures) == {Platform.XHS}

    def test_research_failure_raises_upstream(self, mock_claude_client: ClaudeClient) -> None:
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        mock_claude_client.generate = MagicMock(side_effect=APIConnectionError(request=request))

        with pytest.raises(UpstreamFailure):
            ContentGenerator(mock_claude_client).generate("AI", [Platform.WECHAT])

    def test_empty_reply_fails_only_that_platform(self, mock_claude_client: ClaudeClient) -> None:
        empty = make_mock_response("")
        empty.content = []
        mock_claude_client._client.messages.create.side_effect = [
            make_mock_response("Research briefing."),
            empty,
            make_mock_response(_post_json(title="WeChat title")),
        ]

        result = ContentGenerator(mock_claude_client).generate(
            "AI Regulation", [Platform.XHS, Platform.WECHAT]
        )

        assert [p.title for p in result.posts] == ["WeChat title"]
        assert "no text content" in result.failures[Platform.XHS]
        assert mock_claude_client._client.messages.create.call_count == 3
