"""Campaign runs: validate destinations, pick a topic, generate and store drafts."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from trendpost.config import Settings
from trendpost.content.base import BaseGenerator
from trendpost.errors import InvalidInput
from trendpost.publishing.registry import ProviderRegistry
from trendpost.research.aggregator import TrendAggregator
from trendpost.storage.content import ContentStore
from trendpost.storage.models import Platform
from trendpost.storage.trends import TrendStore

logger = logging.getLogger(__name__)

CUSTOM_TOPIC_SOURCE = "Custom Topic"
MODES = ("auto", "custom")


@dataclass
class SelectedTopic:
    title: str
    source: str
    id: int | None = None  # None for custom topics, which are never stored

    @property
    def persisted(self) -> bool:
        return self.id is not None


@dataclass
class CampaignResult:
    trends_found: int
    processed: str | None
    content_generated: bool = False
    content_ids: list[int] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "trendsFound": self.trends_found,
            "processed": self.processed,
            "contentGenerated": self.content_generated,
            "contentIds": self.content_ids,
            "failures": self.failures,
        }


class CampaignOrchestrator:
    """Runs one campaign: Validating -> SelectingTopic -> Generating -> Persisted."""

    def __init__(
        self,
        settings: Settings,
        registry: ProviderRegistry,
        trend_store: TrendStore,
        content_store: ContentStore,
        generator: BaseGenerator,
        aggregator: TrendAggregator | None = None,
    ) -> None:
        self._settings = settings
        self._registry = registry
        self._trends = trend_store
        self._content = content_store
        self._generator = generator
        self._aggregator = aggregator

    def run(
        self,
        mode: str = "auto",
        topic: str | None = None,
        *,
        platforms: list[Platform] | None = None,
    ) -> CampaignResult:
        if mode not in MODES:
            raise InvalidInput(f"Unknown campaign mode: {mode!r} (expected auto or custom)")

        # No discovery or generation is paid for unless something can receive it
        self._registry.assert_available()

        if mode == "custom":
            selected = self._custom_topic(topic)
            trends_found = 1
        else:
            pending = self._discover()
            trends_found = len(pending)
            if not pending:
                logger.info("No pending trends found; nothing to generate")
                return CampaignResult(trends_found=0, processed=None)
            first = pending[0]
            selected = SelectedTopic(title=first.title, source=first.source, id=first.id)

        targets = [Platform(p) for p in (platforms or self._settings.campaign_platforms)]
        logger.info(
            "Generating content for %r (%s) on %s",
            selected.title,
            selected.source,
            ", ".join(p.value for p in targets),
        )
        generation = self._generator.generate(selected.title, targets)

        content_ids = self._persist(selected, generation.posts)
        if selected.persisted:
            self._trends.mark_processed(selected.id)

        return CampaignResult(
            trends_found=trends_found,
            processed=selected.title,
            content_generated=bool(content_ids),
            content_ids=content_ids,
            failures={p.value: reason for p, reason in generation.failures.items()},
        )

    def _custom_topic(self, topic: str | None) -> SelectedTopic:
        title = (topic or "").strip()
        if not title:
            raise InvalidInput("Custom campaigns need a non-empty topic")
        logger.info("Using custom topic: %s", title)
        return SelectedTopic(title=title, source=CUSTOM_TOPIC_SOURCE)

    def _discover(self):
        if self._aggregator is not None:
            start = time.time()
            self._aggregator.aggregate()
            logger.info("Trend aggregation took %.1fs", time.time() - start)
        return self._trends.pending(self._settings.pending_trend_limit)

    def _persist(self, selected: SelectedTopic, posts) -> list[int]:
        content_ids: list[int] = []
        for post in posts:
            try:
                content_ids.append(
                    self._content.create_draft(selected.title, post, topic_id=selected.id)
                )
            except SQLAlchemyError:
                logger.exception("Error saving %s draft for %r", post.platform.value, selected.title)
        return content_ids
