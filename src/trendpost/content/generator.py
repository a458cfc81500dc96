"""Claude-backed generator: research a topic once, then draft one post per platform."""

from __future__ import annotations

import json
import logging
import re
import time

from anthropic import APIError
from pydantic import ValidationError

from trendpost.content.base import BaseGenerator, GeneratedPost, GenerationResult
from trendpost.errors import UpstreamFailure
from trendpost.llm.client import ClaudeClient
from trendpost.llm.prompts import post_prompt, research_prompt
from trendpost.storage.models import Platform

logger = logging.getLogger(__name__)

PLATFORM_NAMES = {
    Platform.WECHAT: "a WeChat Official Account",
    Platform.XHS: "Xiao Hongshu (RED)",
    Platform.GOOGLEDOCS: "a Google Docs briefing document",
}

PLATFORM_GUIDELINES = {
    Platform.WECHAT: [
        "Title: compelling and SEO-friendly, at most 30 characters",
        "Body: 300-400 words, well-structured with clear sections",
        "Tone: professional, authoritative and engaging",
        "Use a few relevant emojis to help readability",
        "End with a thought-provoking question to encourage comments",
    ],
    Platform.XHS: [
        "Title: eye-catching with emojis, at most 20 characters",
        "Body: 150-200 words, conversational and relatable",
        "Tone: casual, trendy and enthusiastic",
        "Use line breaks, emojis and numbered points",
        "Include 5-7 relevant, trending hashtags",
    ],
    Platform.GOOGLEDOCS: [
        "Title: detailed and descriptive, at most 60 characters",
        "Body: 500-800 words with an introduction, main sections and a conclusion",
        "Tone: professional, detailed and informative",
        "Use headings, bullet points and paragraphs",
        "Include key insights, data points and actionable takeaways",
    ],
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_post(platform: Platform, response: str) -> GeneratedPost:
    """Parse an LLM JSON response into a post.

    Raises ValueError (or a pydantic ValidationError) if the response is not
    a JSON object with a usable title and body.
    """
    text = response.strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    # Some models nest the post under "<platform>_post"
    nested = data.get(f"{platform.value}_post")
    if isinstance(nested, dict):
        data = nested
    return GeneratedPost(
        platform=platform,
        title=data.get("title") or "",
        body=data.get("body") or "",
        hashtags=data.get("hashtags"),
        image_prompt=data.get("image_prompt"),
    )


class ContentGenerator(BaseGenerator):
    """Generates platform-specific marketing posts with Claude."""

    def __init__(self, client: ClaudeClient) -> None:
        self._client = client

    def research(self, topic: str) -> str:
        """Return a short research briefing on ``topic``."""
        try:
            return self._client.generate(
                system=research_prompt(),
                messages=[{"role": "user", "content": f"Topic: {topic}"}],
                temperature=0.7,
                max_tokens=800,
            ).strip()
        except (APIError, ValueError) as e:
            raise UpstreamFailure(f"Failed to research topic {topic!r}", details=str(e)) from e

    def generate(self, topic: str, platforms: list[Platform]) -> GenerationResult:
        start = time.time()
        logger.info("Researching topic: %s", topic)
        research = self.research(topic)

        result = GenerationResult(topic=topic)
        for platform in platforms:
            platform = Platform(platform)
            try:
                result.posts.append(self._generate_post(topic, platform, research))
            except (APIError, ValueError, ValidationError) as e:
                # json.JSONDecodeError is a ValueError
                logger.warning("Generation failed for %s on %r: %s", platform.value, topic, e)
                result.failures[platform] = str(e)

        result.metadata = {
            "generation_time_seconds": round(time.time() - start, 2),
            "token_usage": self._client.usage_summary,
        }
        return result

    def _generate_post(self, topic: str, platform: Platform, research: str) -> GeneratedPost:
        prompt = post_prompt(
            platform_name=PLATFORM_NAMES[platform],
            topic=topic,
            guidelines=PLATFORM_GUIDELINES[platform],
            research=research,
            wants_hashtags=platform is Platform.XHS,
        )
        response = self._client.generate(
            system=prompt,
            messages=[{"role": "user", "content": f"Write the {platform.value} post now."}],
        )
        post = parse_post(platform, response)
        logger.info("Generated %s post %r", platform.value, post.title)
        return post
