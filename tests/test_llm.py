"""Tests for the LLM client wrapper and prompt templates."""

from __future__ import annotations

import httpx
import pytest
from anthropic import APIConnectionError

from trendpost.llm.client import ClaudeClient, _is_retryable
from trendpost.llm.prompts import post_prompt, render
from tests.conftest import make_mock_response


def test_generate_returns_text(mock_claude_client: ClaudeClient) -> None:
    """Test that generate() returns the text from Claude's response."""
    mock_claude_client._client.messages.create.return_value = make_mock_response(
        "Hello, this is a test response."
    )

    result = mock_claude_client.generate(
        system="You are a test assistant.",
        messages=[{"role": "user", "content": "Say hello"}],
    )

    assert result == "Hello, this is a test response."
    assert mock_claude_client._total_input_tokens == 100
    assert mock_claude_client._total_output_tokens == 200


def test_generate_passes_overrides(mock_claude_client: ClaudeClient) -> None:
    mock_claude_client._client.messages.create.return_value = make_mock_response("ok")

    mock_claude_client.generate(
        system="sys",
        messages=[{"role": "user", "content": "hi"}],
        max_tokens=50,
        temperature=0.0,
    )

    kwargs = mock_claude_client._client.messages.create.call_args.kwargs
    assert kwargs["max_tokens"] == 50
    assert kwargs["temperature"] == 0.0
    assert kwargs["system"] == "sys"


def test_usage_summary_accumulates(mock_claude_client: ClaudeClient) -> None:
    """Test that token usage accumulates across calls."""
    mock_claude_client._client.messages.create.return_value = make_mock_response(
        "Response 1", input_tokens=50, output_tokens=100
    )
    mock_claude_client.generate(system="test", messages=[{"role": "user", "content": "1"}])

    mock_claude_client._client.messages.create.return_value = make_mock_response(
        "Response 2", input_tokens=75, output_tokens=150
    )
    mock_claude_client.generate(system="test", messages=[{"role": "user", "content": "2"}])

    summary = mock_claude_client.usage_summary
    assert summary["total_input_tokens"] == 125
    assert summary["total_output_tokens"] == 250


def test_auth_error_not_retried() -> None:
    """Test that AuthenticationError is never treated as transient."""
    from anthropic import AuthenticationError

    exc = AuthenticationError.__new__(AuthenticationError)
    assert _is_retryable(exc) is False


def test_connection_error_is_retryable() -> None:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    assert _is_retryable(APIConnectionError(request=request)) is True


def test_programming_errors_are_not_retried() -> None:
    assert _is_retryable(IndexError("list index out of range")) is False
    assert _is_retryable(ValueError("bad json")) is False


def test_empty_reply_raises_value_error(mock_claude_client: ClaudeClient) -> None:
    response = make_mock_response("")
    response.content = []
    mock_claude_client._client.messages.create.return_value = response

    with pytest.raises(ValueError):
        mock_claude_client.generate(system="sys", messages=[{"role": "user", "content": "hi"}])
    mock_claude_client._client.messages.create.assert_called_once()


def test_render_platform_prompt() -> None:
    """Test that the platform prompt renders its guidelines and research."""
    rendered = render(
        "platform_post.j2",
        platform_name="Xiao Hongshu (RED)",
        topic="AI Regulation",
        guidelines=["Body: 150-200 words", "Include 5-7 hashtags"],
        research="Lawmakers voted this week.",
        wants_hashtags=True,
    )

    assert "AI Regulation" in rendered
    assert "Xiao Hongshu (RED)" in rendered
    assert "- Body: 150-200 words" in rendered
    assert "Lawmakers voted this week." in rendered
    assert '"hashtags"' in rendered


def test_render_platform_prompt_without_hashtags() -> None:
    rendered = render(
        "platform_post.j2",
        platform_name="a WeChat Official Account",
        topic="AI",
        guidelines=[],
        research="",
        wants_hashtags=False,
    )
    assert '"hashtags"' not in rendered
    assert '"image_prompt"' in rendered


def test_post_prompt_fills_missing_research() -> None:
    rendered = post_prompt(
        platform_name="a Google Docs briefing document",
        topic="AI",
        guidelines=["Tone: professional"],
        research="",
        wants_hashtags=False,
    )
    assert "(no research available)" in rendered
    assert "- Tone: professional" in rendered
