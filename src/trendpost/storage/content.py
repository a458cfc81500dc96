"""Generated posts and their approval lifecycle.

Statuses move ``pending_approval`` (or ``draft``) -> ``approved`` ->
``published``, or ``pending_approval`` -> ``rejected``. ``published`` and
``rejected`` are terminal. Repeating an approval or rejection on an item
that has already left the review states succeeds without changing it, so a
retried request never surfaces as a failure. Publishing is stricter: it is
only legal from ``approved``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlmodel import col, select

from trendpost.errors import InvalidInput, InvalidState, NotFound
from trendpost.storage.database import get_session
from trendpost.storage.models import ContentItem, ContentStatus, utcnow

if TYPE_CHECKING:
    from trendpost.content.base import GeneratedPost

logger = logging.getLogger(__name__)

_REVIEWABLE = {ContentStatus.DRAFT.value, ContentStatus.PENDING_APPROVAL.value}

_ORDER_COLUMN = {
    ContentStatus.APPROVED: ContentItem.approved_at,
    ContentStatus.PUBLISHED: ContentItem.published_at,
}


class ContentStore:
    """Persisted content items with enforced status transitions."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    def create_draft(
        self,
        topic_title: str,
        post: GeneratedPost,
        *,
        topic_id: int | None = None,
    ) -> int:
        """Insert a generated post awaiting approval and return its id."""
        item = ContentItem(
            topic_id=topic_id,
            topic_title=topic_title,
            platform=post.platform.value,
            title=post.title,
            body=post.body,
            hashtags=post.hashtags,
            image_prompt=post.image_prompt,
            status=ContentStatus.PENDING_APPROVAL.value,
        )
        with get_session(self._db_path) as session:
            session.add(item)
            session.commit()
            session.refresh(item)
        logger.info("Saved %s draft %d for topic %r", item.platform, item.id, topic_title)
        return item.id

    def get(self, content_id: int) -> ContentItem:
        with get_session(self._db_path) as session:
            item = session.get(ContentItem, content_id)
        if item is None:
            raise NotFound(f"Content {content_id} not found")
        return item

    def approve(self, content_id: int) -> ContentItem:
        return self._review(content_id, ContentStatus.APPROVED)

    def reject(self, content_id: int) -> ContentItem:
        return self._review(content_id, ContentStatus.REJECTED)

    def _review(self, content_id: int, target: ContentStatus) -> ContentItem:
        with get_session(self._db_path) as session:
            item = session.get(ContentItem, content_id)
            if item is None:
                raise NotFound(f"Content {content_id} not found")
            if item.status not in _REVIEWABLE:
                logger.info(
                    "Content %d already %s; %s is a no-op",
                    content_id,
                    item.status,
                    target.value,
                )
                return item

            item.status = target.value
            if target is ContentStatus.APPROVED:
                item.approved_at = utcnow()
            session.add(item)
            session.commit()
            session.refresh(item)
        logger.info("Content %d %s", content_id, target.value)
        return item

    def publish(self, content_id: int, published_url: str | None) -> ContentItem:
        """Record a successful publish. Only approved items may be published."""
        with get_session(self._db_path) as session:
            item = session.get(ContentItem, content_id)
            if item is None:
                raise NotFound(f"Content {content_id} not found")
            if item.status != ContentStatus.APPROVED.value:
                raise InvalidState(
                    f"Content {content_id} must be approved before publishing "
                    f"(current status: {item.status})"
                )
            item.status = ContentStatus.PUBLISHED.value
            item.published_at = utcnow()
            item.published_url = published_url
            session.add(item)
            session.commit()
            session.refresh(item)
        logger.info("Content %d published (%s)", content_id, published_url or "no url")
        return item

    def list_by_status(self, status: ContentStatus | str) -> list[ContentItem]:
        """Items in ``status``, newest first by the timestamp of that state."""
        try:
            status = ContentStatus(status)
        except ValueError:
            raise InvalidInput(f"Unknown content status: {status}") from None
        order_col = _ORDER_COLUMN.get(status, ContentItem.created_at)
        with get_session(self._db_path) as session:
            return list(
                session.exec(
                    select(ContentItem)
                    .where(ContentItem.status == status.value)
                    .order_by(
                        col(order_col).desc(),
                        col(ContentItem.created_at).desc(),
                        col(ContentItem.id).desc(),
                    )
                ).all()
            )

    def summary(self) -> dict[str, int]:
        """Count of items per status (every status present, zero if empty)."""
        counts = {s.value: 0 for s in ContentStatus}
        with get_session(self._db_path) as session:
            rows = session.exec(
                select(ContentItem.status, func.count()).group_by(ContentItem.status)
            ).all()
        for status, count in rows:
            counts[status] = count
        return counts
