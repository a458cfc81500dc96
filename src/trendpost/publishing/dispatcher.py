"""Deliver approved content to its destination and record the outcome."""

from __future__ import annotations

import logging

from trendpost.errors import InvalidState, ProviderNotConfigured, UpstreamFailure
from trendpost.publishing.base import PublishResult
from trendpost.publishing.registry import ProviderRegistry
from trendpost.storage.content import ContentStore
from trendpost.storage.models import ContentItem, ContentStatus

logger = logging.getLogger(__name__)


class PublishingDispatcher:
    """Routes content to the publisher registered for its platform."""

    def __init__(self, registry: ProviderRegistry, store: ContentStore) -> None:
        self._registry = registry
        self._store = store

    def dispatch(self, content: ContentItem) -> PublishResult:
        """Attempt delivery of one item.

        Configuration problems raise ProviderNotConfigured. Any failure of the
        destination itself is returned as an unsuccessful result.
        """
        publisher = self._registry.publisher_for(content.platform)
        if not publisher.is_configured():
            raise ProviderNotConfigured(
                f"{publisher.name} is not configured. "
                f"Missing: {', '.join(publisher.missing_keys()) or 'credentials'}"
            )

        try:
            result = publisher.publish(content)
        except ProviderNotConfigured:
            raise
        except Exception as e:
            logger.error("Publishing content %s to %s failed: %s", content.id, publisher.name, e)
            return PublishResult(success=False, error=str(e))

        if not result.success:
            logger.error(
                "Publishing content %s to %s failed: %s", content.id, publisher.name, result.error
            )
        return result

    def publish(self, content_id: int) -> ContentItem:
        """Publish an approved item and mark it published.

        A failed delivery leaves the item ``approved`` so it can be retried.
        """
        content = self._store.get(content_id)
        if content.status != ContentStatus.APPROVED.value:
            raise InvalidState(
                f"Content {content_id} must be approved before publishing "
                f"(current status: {content.status})"
            )

        result = self.dispatch(content)
        if not result.success:
            raise UpstreamFailure(
                "Publishing failed for all platforms",
                details=f"Platform publishing failed: {result.error}",
            )
        return self._store.publish(content_id, result.url)
