"""Shared fixtures: fake adapters and a recording feed writer."""

import asyncio
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest

from feed_aggregator.core import (
    Category,
    ContentItem,
    FeedWriter,
    ScrapeResult,
    SourceAdapter,
)

BASE_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_item(
    title: str,
    source: str = "Test Source",
    category: Category = Category.TECHNOLOGY,
    hours_ago: float = 0,
    description: Optional[str] = None,
) -> ContentItem:
    return ContentItem.create(
        title=title,
        url=f"https://example.com/{source.lower().replace(' ', '-')}/{title.lower().replace(' ', '-')}",
        category=category,
        source=source,
        published_at=BASE_TIME - timedelta(hours=hours_ago),
        description=description,
    )


class FakeAdapter(SourceAdapter):
    """Adapter returning canned results, or failing on demand."""

    def __init__(
        self,
        source_id: str,
        items: Optional[list[ContentItem]] = None,
        categories: Optional[list[Category]] = None,
        error: Optional[str] = None,
        exception: Optional[Exception] = None,
        delay: float = 0,
        refresh_minutes: int = 60,
        name: Optional[str] = None,
    ) -> None:
        self._source_id = source_id
        self._name = name or source_id.title()
        self.items = items or []
        self.categories = categories or [Category.TECHNOLOGY]
        self.error = error
        self.exception = exception
        self.delay = delay
        self.refresh_minutes = refresh_minutes
        self.calls: list[Category] = []

    @property
    def source_id(self) -> str:
        return self._source_id

    @property
    def name(self) -> str:
        return self._name

    def supported_categories(self) -> list[Category]:
        return self.categories

    def refresh_interval(self, category: Category) -> timedelta:
        return timedelta(minutes=self.refresh_minutes)

    async def fetch_category(self, category: Category) -> ScrapeResult:
        self.calls.append(category)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exception is not None:
            raise self.exception
        if self.error is not None:
            return ScrapeResult.failed(self.error, self.name, self.source_id, category)
        items = [i for i in self.items if i.category == category]
        return ScrapeResult.ok(items, self.name, self.source_id, category)


class RecordingWriter(FeedWriter):
    """Feed writer that remembers what it was asked to write."""

    def __init__(self, fail_on: Optional[str] = None) -> None:
        self.written: dict[str, list[ContentItem]] = {}
        self.fail_on = fail_on
        self.threads: set[int] = set()

    def write(self, items: list[ContentItem], title: str, description: str, path: Path) -> Path:
        self.threads.add(threading.get_ident())
        if self.fail_on and path.name == self.fail_on:
            raise OSError(f"disk full: {path}")
        self.written[path.as_posix()] = list(items)
        return path

    def items_for(self, suffix: str) -> list[ContentItem]:
        matches = [items for path, items in self.written.items() if path.endswith(suffix)]
        assert len(matches) == 1, f"expected one feed ending with {suffix}, got {list(self.written)}"
        return matches[0]


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "news-cache.json"
