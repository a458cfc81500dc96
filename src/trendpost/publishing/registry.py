"""Registry of publishing destinations and the pre-campaign admission gate."""

from __future__ import annotations

import logging
import time
from typing import Callable

from trendpost.config import Settings
from trendpost.errors import InvalidInput, NoProviderConfigured, TrendpostError
from trendpost.publishing.base import ProviderCheck, Publisher, PublishingProvider
from trendpost.publishing.googledocs import GoogleDocsPublisher
from trendpost.publishing.social import WeChatPublisher, XhsPublisher
from trendpost.storage.models import Platform

logger = logging.getLogger(__name__)


def default_publishers(settings: Settings) -> list[Publisher]:
    return [WeChatPublisher(settings), XhsPublisher(settings), GoogleDocsPublisher(settings)]


class ProviderRegistry:
    """Reports which destinations are configured and hands out publishers.

    Provider status is cached for ``cache_seconds``. The cache is invalidated
    by time only, so a settings change can take up to that long to show up.
    """

    def __init__(
        self,
        settings: Settings,
        publishers: list[Publisher] | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._publishers: dict[Platform, Publisher] = {
            p.platform: p for p in (publishers or default_publishers(settings))
        }
        self._clock = clock
        self._cache: list[PublishingProvider] | None = None
        self._cached_at = 0.0

    def publisher_for(self, platform: Platform | str) -> Publisher:
        try:
            return self._publishers[Platform(platform)]
        except (KeyError, ValueError):
            raise InvalidInput(f"Unsupported platform: {platform}") from None

    def list_all(self) -> list[PublishingProvider]:
        now = self._clock()
        ttl = self._settings.provider_cache_seconds
        if self._cache is not None and now - self._cached_at < ttl:
            return self._cache

        self._cache = [p.provider() for p in self._publishers.values()]
        self._cached_at = now
        return self._cache

    def invalidate(self) -> None:
        self._cache = None

    def available(self) -> list[PublishingProvider]:
        return [p for p in self.list_all() if p.configured]

    def assert_available(self) -> list[PublishingProvider]:
        """Raise NoProviderConfigured unless at least one destination is usable."""
        available = self.available()
        if not available:
            missing = "\n".join(
                f"{p.name}: Missing {', '.join(p.missing_keys)}" for p in self.list_all()
            )
            logger.error("No publishing providers configured. Campaign cannot proceed.")
            logger.error("Missing configurations:\n%s", missing)
            raise NoProviderConfigured(
                "No publishing providers configured. Please configure at least one of: "
                f"WeChat, XHS, or Google Docs before starting a campaign.\n{missing}",
                details=missing,
            )

        logger.info(
            "Campaign validation passed. Available providers: %s",
            ", ".join(p.name for p in available),
        )
        return available

    def status_report(self) -> dict:
        providers = self.list_all()
        available = [p for p in providers if p.configured]
        unavailable = [p for p in providers if not p.configured]
        if available:
            summary = (
                f"{len(available)} provider(s) configured: "
                + ", ".join(p.name for p in available)
            )
        else:
            summary = "No publishing providers configured"
        return {
            "has_providers": bool(available),
            "available": available,
            "unavailable": unavailable,
            "summary": summary,
        }

    def test_all(self) -> list[ProviderCheck]:
        """Best-effort live check of every configured destination."""
        results: list[ProviderCheck] = []
        for provider in self.list_all():
            check = ProviderCheck(
                provider=provider.name,
                platform=provider.platform,
                configured=provider.configured,
            )
            if provider.configured:
                check.tested = True
                try:
                    check.working = self._publishers[provider.platform].test()
                except TrendpostError as e:
                    check.working = False
                    check.error = e.message
                    logger.warning("Provider test failed for %s: %s", provider.name, e)
            results.append(check)
        return results
