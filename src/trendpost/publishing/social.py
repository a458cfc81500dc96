"""WeChat and Xiao Hongshu destinations.

Neither platform has an API integration yet. Once credentials are present a
publish is acknowledged as a manual hand-off: it reports success with no
URL, and the operator posts the approved text by hand.
"""

from __future__ import annotations

import logging

from trendpost.errors import ProviderNotConfigured
from trendpost.publishing.base import Publisher, PublishResult
from trendpost.storage.models import ContentItem, Platform

logger = logging.getLogger(__name__)


class _HandoffPublisher(Publisher):
    def publish(self, content: ContentItem) -> PublishResult:
        missing = self.missing_keys()
        if missing:
            raise ProviderNotConfigured(
                f"{self.name} credentials not configured. "
                f"Please configure {', '.join(missing)} in settings."
            )
        # TODO: replace the hand-off with the platform's draft/publish API
        logger.warning(
            "%s has no API integration; content %s marked for manual posting",
            self.name,
            content.id,
        )
        return PublishResult(success=True)


class WeChatPublisher(_HandoffPublisher):
    platform = Platform.WECHAT
    name = "WeChat Official Account"
    required_keys = ("wechat_app_id", "wechat_app_secret")


class XhsPublisher(_HandoffPublisher):
    platform = Platform.XHS
    name = "Xiao Hongshu (Semi-automated)"
    required_keys = ("xhs_cookie",)
