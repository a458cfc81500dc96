"""Wrapper around the Anthropic Claude SDK."""

from __future__ import annotations

import logging

from anthropic import Anthropic, APIConnectionError, APIStatusError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from trendpost.config import Settings

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    """Retry rate limits, server errors, timeouts and connection failures only."""
    if isinstance(exc, APIConnectionError):
        return True
    if isinstance(exc, APIStatusError):
        return exc.status_code == 429 or exc.status_code >= 500
    return False


def _text_of(response) -> str:
    """Concatenate the text blocks of a reply. An empty reply is a ValueError."""
    parts = [
        block.text
        for block in response.content or []
        if isinstance(getattr(block, "text", None), str)
    ]
    if not parts:
        raise ValueError("Claude returned no text content")
    return "".join(parts)


class ClaudeClient:
    """Thin wrapper providing retry logic, a request timeout and token tracking."""

    def __init__(self, settings: Settings) -> None:
        self._client = Anthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.llm_timeout_seconds,
        )
        self._model = settings.model
        self._max_tokens = settings.max_tokens
        self._temperature = settings.temperature
        self._total_input_tokens = 0
        self._total_output_tokens = 0

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    def generate(
        self,
        system: str,
        messages: list[dict],
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Send a message to Claude and return the text response."""
        response = self._client.messages.create(
            model=self._model,
            max_tokens=max_tokens or self._max_tokens,
            temperature=temperature if temperature is not None else self._temperature,
            system=system,
            messages=messages,
        )
        self._total_input_tokens += response.usage.input_tokens
        self._total_output_tokens += response.usage.output_tokens
        logger.debug(
            "Claude call used %d input / %d output tokens",
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
        return _text_of(response)

    @property
    def usage_summary(self) -> dict:
        return {
            "total_input_tokens": self._total_input_tokens,
            "total_output_tokens": self._total_output_tokens,
        }
