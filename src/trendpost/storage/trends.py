"""Deduplicated queue of discovered topics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from trendpost.errors import NotFound
from trendpost.storage.database import get_session
from trendpost.storage.models import Topic, TopicStatus, normalize_title, utcnow

logger = logging.getLogger(__name__)


@dataclass
class TrendItem:
    """A topic candidate as returned by a trend source."""

    title: str
    source: str
    source_url: str | None = None
    summary: str = ""
    published: datetime | None = None


class TrendStore:
    """Persisted topics keyed by normalized title."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    def upsert_discovered(self, items: list[TrendItem]) -> int:
        """Insert topics whose normalized title is not stored yet.

        Existing rows are never updated. A failure on one item is logged and
        the rest of the batch continues. Returns the number of rows inserted.
        """
        inserted = 0
        with get_session(self._db_path) as session:
            for item in items:
                title = (item.title or "").strip()
                if not title:
                    continue
                key = normalize_title(title)
                try:
                    existing = session.exec(
                        select(Topic.id).where(Topic.normalized_title == key)
                    ).first()
                    if existing is not None:
                        continue
                    session.add(
                        Topic(
                            title=title,
                            normalized_title=key,
                            source=item.source,
                            source_url=item.source_url,
                        )
                    )
                    session.commit()
                    inserted += 1
                    logger.info("Saved new trend: %s", title)
                except SQLAlchemyError:
                    session.rollback()
                    logger.exception("Error saving trend %r", title)
        return inserted

    def pending(self, limit: int = 10) -> list[Topic]:
        """Return up to ``limit`` pending topics, most recently discovered first."""
        with get_session(self._db_path) as session:
            return list(
                session.exec(
                    select(Topic)
                    .where(Topic.status == TopicStatus.PENDING.value)
                    .order_by(col(Topic.discovered_at).desc(), col(Topic.id).desc())
                    .limit(limit)
                ).all()
            )

    def get(self, topic_id: int) -> Topic:
        with get_session(self._db_path) as session:
            topic = session.get(Topic, topic_id)
        if topic is None:
            raise NotFound(f"Topic {topic_id} not found")
        return topic

    def mark_processed(self, topic_id: int) -> Topic:
        """Mark a topic as used. Re-marking a processed topic changes nothing."""
        with get_session(self._db_path) as session:
            topic = session.get(Topic, topic_id)
            if topic is None:
                raise NotFound(f"Topic {topic_id} not found")
            if topic.status != TopicStatus.PROCESSED.value:
                topic.status = TopicStatus.PROCESSED.value
                topic.processed_at = utcnow()
                session.add(topic)
                session.commit()
                session.refresh(topic)
                logger.info("Marked trend %d as processed", topic_id)
            return topic
