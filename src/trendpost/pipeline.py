"""Build the pipeline's components from one Settings object."""

from __future__ import annotations

from dataclasses import dataclass

from trendpost.campaign import CampaignOrchestrator
from trendpost.config import Settings
from trendpost.content.base import BaseGenerator
from trendpost.content.generator import ContentGenerator
from trendpost.llm.client import ClaudeClient
from trendpost.publishing.dispatcher import PublishingDispatcher
from trendpost.publishing.registry import ProviderRegistry
from trendpost.research.aggregator import TrendAggregator
from trendpost.research.fetcher import TrendFetcher
from trendpost.storage.content import ContentStore
from trendpost.storage.trends import TrendStore


@dataclass
class Pipeline:
    settings: Settings
    trends: TrendStore
    content: ContentStore
    registry: ProviderRegistry
    dispatcher: PublishingDispatcher
    fetcher: TrendFetcher
    aggregator: TrendAggregator
    orchestrator: CampaignOrchestrator

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        generator: BaseGenerator | None = None,
        registry: ProviderRegistry | None = None,
        fetcher: TrendFetcher | None = None,
    ) -> Pipeline:
        trends = TrendStore(settings.db_path)
        content = ContentStore(settings.db_path)
        registry = registry or ProviderRegistry(settings)
        fetcher = fetcher or TrendFetcher(
            serpapi_key=settings.serpapi_key,
            timeout=settings.http_timeout_seconds,
        )
        aggregator = TrendAggregator(settings, fetcher, trends)
        if generator is None:
            generator = ContentGenerator(ClaudeClient(settings))
        orchestrator = CampaignOrchestrator(
            settings,
            registry,
            trends,
            content,
            generator,
            aggregator=aggregator,
        )
        return cls(
            settings=settings,
            trends=trends,
            content=content,
            registry=registry,
            dispatcher=PublishingDispatcher(registry, content),
            fetcher=fetcher,
            aggregator=aggregator,
            orchestrator=orchestrator,
        )

    def close(self) -> None:
        self.fetcher.close()
