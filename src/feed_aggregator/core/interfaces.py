"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from datetime import timedelta
from pathlib import Path

from feed_aggregator.core.entities import Category, ContentItem, ScrapeResult


class SourceAdapter(ABC):
    """Interface for fetching one source's content, category by category.

    Implementations must never raise from ``fetch_category``: every failure
    is reported as a failed ``ScrapeResult``.
    """

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Configured identifier, used in cache keys and feed paths."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable source name carried on items."""
        pass

    @abstractmethod
    def supported_categories(self) -> list[Category]:
        pass

    @abstractmethod
    def refresh_interval(self, category: Category) -> timedelta:
        """How long cached data for this category stays fresh."""
        pass

    @abstractmethod
    async def fetch_category(self, category: Category) -> ScrapeResult:
        """Fetch and parse one category."""
        pass

    def supports_category(self, category: Category) -> bool:
        return category in self.supported_categories()


class FeedWriter(ABC):
    """Interface for serializing item sequences to feed files."""

    @abstractmethod
    def write(
        self,
        items: list[ContentItem],
        title: str,
        description: str,
        path: Path,
    ) -> Path:
        """Write feed and return the path written."""
        pass
