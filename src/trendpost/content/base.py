"""Abstract base class for content generators and their result types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from pydantic import BaseModel, field_validator

from trendpost.storage.models import Platform


class GeneratedPost(BaseModel):
    """One platform-specific post produced by a generator."""

    platform: Platform
    title: str
    body: str
    hashtags: str | None = None
    image_prompt: str | None = None

    @field_validator("title", "body")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("hashtags", mode="before")
    @classmethod
    def _join_hashtags(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            tags = [str(t).strip() for t in value if str(t).strip()]
            return " ".join(t if t.startswith("#") else f"#{t}" for t in tags) or None
        return value


@dataclass
class GenerationResult:
    """Posts that were generated, plus a reason for each platform that failed."""

    topic: str
    posts: list[GeneratedPost] = field(default_factory=list)
    failures: dict[Platform, str] = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)


class BaseGenerator(ABC):
    """Produces one post per requested platform for a topic.

    Implementations must not let one platform's failure abort the others:
    such failures go into ``GenerationResult.failures``. Errors that affect
    every platform (e.g. the LLM being unreachable) may be raised.
    """

    @abstractmethod
    def generate(self, topic: str, platforms: list[Platform]) -> GenerationResult:
        """Generate posts for ``topic`` on each of ``platforms``."""
        ...
