"""Combine trend sources, deduplicate, and queue new topics."""

from __future__ import annotations

import logging

from trendpost.config import Settings
from trendpost.errors import TrendpostError
from trendpost.research.fetcher import TrendFetcher
from trendpost.storage.models import normalize_title
from trendpost.storage.trends import TrendItem, TrendStore

logger = logging.getLogger(__name__)


def deduplicate(items: list[TrendItem]) -> list[TrendItem]:
    """Keep the first item for each normalized title."""
    seen: set[str] = set()
    unique: list[TrendItem] = []
    for item in items:
        key = normalize_title(item.title or "")
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


class TrendAggregator:
    """Fetch from every configured source and upsert into the trend store."""

    def __init__(self, settings: Settings, fetcher: TrendFetcher, store: TrendStore) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._store = store

    def aggregate(self) -> list[TrendItem]:
        """Return the unique items seen in this pass (new or already stored)."""
        items: list[TrendItem] = []

        if self._settings.rss_feeds:
            items.extend(
                self._fetcher.fetch_feeds(
                    self._settings.rss_feeds,
                    max_items=self._settings.max_items_per_feed,
                )
            )

        if self._fetcher.has_trends_api:
            try:
                items.extend(self._fetcher.fetch_google_trends(self._settings.trends_geo))
            except TrendpostError as e:
                logger.error("Google Trends fetch failed, continuing with other sources: %s", e)

        unique = deduplicate(items)
        inserted = self._store.upsert_discovered(unique)
        logger.info("Aggregated %d unique trends (%d new)", len(unique), inserted)
        return unique
