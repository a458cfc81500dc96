"""Publisher interface shared by every publishing destination."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from trendpost.config import Settings
from trendpost.storage.models import ContentItem, Platform


@dataclass
class PublishResult:
    """Outcome of one delivery attempt."""

    success: bool
    url: str | None = None
    error: str | None = None


@dataclass
class PublishingProvider:
    """Configuration status of a destination, derived from current settings."""

    name: str
    platform: Platform
    required_keys: list[str]
    missing_keys: list[str] = field(default_factory=list)

    @property
    def configured(self) -> bool:
        return not self.missing_keys


@dataclass
class ProviderCheck:
    """Result of a live connectivity test."""

    provider: str
    platform: Platform
    configured: bool
    tested: bool = False
    working: bool = False
    error: str | None = None


class Publisher(ABC):
    """A destination that can receive approved content."""

    platform: Platform
    name: str
    required_keys: tuple[str, ...] = ()

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def missing_keys(self) -> list[str]:
        return [key for key in self.required_keys if not self._settings.is_set(key)]

    def is_configured(self) -> bool:
        return not self.missing_keys()

    def provider(self) -> PublishingProvider:
        return PublishingProvider(
            name=self.name,
            platform=self.platform,
            required_keys=list(self.required_keys),
            missing_keys=self.missing_keys(),
        )

    @abstractmethod
    def publish(self, content: ContentItem) -> PublishResult:
        """Deliver ``content``. Raise on failure; never report false success."""
        ...

    def test(self) -> bool:
        """Live connectivity check.

        Destinations without a reliable test report working without making
        a call; this is not a guarantee that publishing will succeed.
        """
        return True
