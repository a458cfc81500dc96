"""SQLModel database models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlmodel import Field, SQLModel


class Platform(str, Enum):
    WECHAT = "wechat"
    XHS = "xhs"
    GOOGLEDOCS = "googledocs"


class TopicStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"


class ContentStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PUBLISHED = "published"
    REJECTED = "rejected"


def utcnow() -> datetime:
    """Timezone-aware current time; naive datetimes are rejected on write."""
    return datetime.now(timezone.utc)


def normalize_title(title: str) -> str:
    """Dedup key for topics: trimmed and case-folded."""
    return title.strip().lower()


class Topic(SQLModel, table=True):
    """A discovered trend candidate."""

    id: int | None = Field(default=None, primary_key=True)
    title: str
    normalized_title: str = Field(index=True)
    source: str
    source_url: str | None = None
    status: str = TopicStatus.PENDING.value  # pending | processed
    discovered_at: datetime = Field(default_factory=utcnow)
    processed_at: datetime | None = None


class ContentItem(SQLModel, table=True):
    """One generated post for one platform, tracked through approval."""

    id: int | None = Field(default=None, primary_key=True)
    topic_id: int | None = Field(default=None, index=True)  # weak reference, no FK
    topic_title: str = ""
    platform: str
    title: str
    body: str
    hashtags: str | None = None
    image_prompt: str | None = None
    image_url: str | None = None
    status: str = Field(default=ContentStatus.PENDING_APPROVAL.value, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    approved_at: datetime | None = None
    published_at: datetime | None = None
    published_url: str | None = None
