"""Fetch trend candidates from RSS feeds and Google Trends (via SerpAPI)."""

from __future__ import annotations

import logging
from datetime import datetime
from urllib.parse import quote_plus

import feedparser
import httpx
from bs4 import BeautifulSoup
from dateutil import parser as dateparser

from trendpost.config import FeedSource
from trendpost.errors import ProviderNotConfigured, UpstreamFailure
from trendpost.storage.trends import TrendItem

logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search"
GOOGLE_TRENDS_SOURCE = "Google Trends"


class TrendFetcher:
    """Fetch and parse trend items from feeds and the trends API."""

    def __init__(self, *, serpapi_key: str = "", timeout: float = 30.0) -> None:
        self._serpapi_key = serpapi_key
        self._client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": "trendpost trend discovery/0.1"},
            follow_redirects=True,
        )

    @property
    def has_trends_api(self) -> bool:
        return bool(self._serpapi_key.strip())

    def fetch_feed(self, feed: FeedSource, max_items: int = 20) -> list[TrendItem]:
        """Download and parse one RSS/Atom feed."""
        resp = self._client.get(feed.url)
        resp.raise_for_status()
        parsed = feedparser.parse(resp.content)
        if parsed.bozo and not parsed.entries:
            raise ValueError(f"Unparseable feed: {parsed.get('bozo_exception')}")

        items: list[TrendItem] = []
        for entry in parsed.entries[:max_items]:
            summary_raw = entry.get("summary", "")
            summary = BeautifulSoup(summary_raw, "html.parser").get_text()[:500]
            items.append(
                TrendItem(
                    title=entry.get("title", "Untitled"),
                    source=feed.name,
                    source_url=entry.get("link"),
                    summary=summary,
                    published=self._parse_date(entry.get("published")),
                )
            )
        return items

    def fetch_feeds(self, feeds: list[FeedSource], max_items: int = 20) -> list[TrendItem]:
        """Fetch every feed; a failing feed is logged and skipped."""
        all_items: list[TrendItem] = []
        for feed in feeds:
            try:
                logger.info("Fetching RSS feed: %s", feed.name)
                items = self.fetch_feed(feed, max_items=max_items)
            except (httpx.HTTPError, ValueError) as e:
                logger.error("Error fetching RSS feed %s: %s", feed.name, e)
                continue
            logger.info("Fetched %d items from %s", len(items), feed.name)
            all_items.extend(items)
        return all_items

    def fetch_google_trends(self, geo: str = "US") -> list[TrendItem]:
        """Fetch currently trending searches for ``geo``."""
        if not self.has_trends_api:
            raise ProviderNotConfigured("SerpAPI key not configured")

        logger.info("Fetching Google Trends via SerpAPI")
        try:
            resp = self._client.get(
                SERPAPI_URL,
                params={
                    "engine": "google_trends_trending_now",
                    "geo": geo,
                    "api_key": self._serpapi_key,
                },
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                raise ProviderNotConfigured("Invalid SerpAPI key") from e
            raise UpstreamFailure("Failed to fetch Google Trends", details=str(e)) from e
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamFailure("Failed to fetch Google Trends", details=str(e)) from e

        items = [
            TrendItem(
                title=query,
                source=GOOGLE_TRENDS_SOURCE,
                source_url=f"https://trends.google.com/trends/explore?q={quote_plus(query)}",
            )
            for query in self._trending_queries(data)
        ]
        logger.info("Fetched %d trends from Google", len(items))
        return items

    @staticmethod
    def _trending_queries(data: object) -> list[str]:
        """Pull query strings out of either the "trending now" or "daily" layout.

        Raises UpstreamFailure when the body does not have either shape.
        """
        if not isinstance(data, dict):
            raise UpstreamFailure("Unexpected Google Trends response", details=repr(data)[:200])
        searches = data.get("trending_searches") or []
        if isinstance(searches, dict):
            days = searches.get("daily") or []
            if not isinstance(days, list) or not all(isinstance(d, dict) for d in days):
                raise UpstreamFailure("Unexpected Google Trends response", details="daily")
            searches = [s for day in days for s in day.get("trending_searches") or []]
        if not isinstance(searches, list):
            raise UpstreamFailure(
                "Unexpected Google Trends response", details="trending_searches"
            )

        queries: list[str] = []
        for search in searches:
            if not isinstance(search, dict):
                continue
            query = search.get("query")
            if isinstance(query, dict):
                query = query.get("query")
            if query:
                queries.append(str(query))
        return queries

    @staticmethod
    def _parse_date(date_str: str | None) -> datetime | None:
        if not date_str:
            return None
        try:
            return dateparser.parse(date_str)
        except (ValueError, TypeError, OverflowError):
            return None

    def close(self) -> None:
        self._client.close()
