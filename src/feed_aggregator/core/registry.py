"""Bookkeeping of written feeds for discovery pages."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from feed_aggregator.core.entities import Category, FeedDescriptor, utc_now
from feed_aggregator.logger import get_logger

MASTER_FEED_NAME = "Master Feed"

logger = get_logger(__name__)


def describe_feed(category: Optional[Category], sources: list[str]) -> str:
    source_list = ", ".join(sources)
    if category:
        return f"{category.label} news aggregated from {source_list}"
    return f"Combined news feed from all categories, aggregated from {source_list}"


def _sort_key(descriptor: FeedDescriptor) -> tuple:
    return (
        descriptor.name != MASTER_FEED_NAME,
        descriptor.category is not None,
        descriptor.category.value if descriptor.category else "",
        descriptor.name,
    )


class FeedRegistry:
    """Feed descriptors keyed by (name, category), master first."""

    def __init__(
        self,
        path: Optional[Path] = None,
        base_url: str = "",
        update_frequency: str = "Every hour",
    ) -> None:
        self.path = Path(path) if path else None
        self.base_url = base_url.rstrip("/")
        self.update_frequency = update_frequency
        self.last_updated: datetime = utc_now()
        self._feeds: list[FeedDescriptor] = []

    @property
    def feeds(self) -> list[FeedDescriptor]:
        return list(self._feeds)

    def upsert(self, descriptor: FeedDescriptor) -> None:
        """Replace any descriptor with the same key and re-sort."""
        if not descriptor.description:
            descriptor.description = describe_feed(descriptor.category, descriptor.sources)

        self._feeds = [f for f in self._feeds if f.key != descriptor.key]
        self._feeds.append(descriptor)
        self._feeds.sort(key=_sort_key)
        self.last_updated = utc_now()

    def master(self) -> Optional[FeedDescriptor]:
        return next((f for f in self._feeds if f.name == MASTER_FEED_NAME), None)

    def by_category(self, category: Category) -> list[FeedDescriptor]:
        return [f for f in self._feeds if f.category == category]

    def urls(self) -> list[str]:
        return [f.url for f in self._feeds]

    def url_for(self, relative_path: str) -> str:
        relative_path = relative_path.lstrip("/")
        if not self.base_url:
            return relative_path
        return f"{self.base_url}/{relative_path}"

    def to_document(self) -> dict[str, Any]:
        return {
            "metadata": {
                "total_feeds": len(self._feeds),
                "last_updated": self.last_updated.isoformat(),
                "base_url": self.base_url,
                "update_frequency": self.update_frequency,
            },
            "feeds": [
                {
                    "name": f.name,
                    "category": f.category.value if f.category else None,
                    "url": f.url,
                    "path": f.path,
                    "description": f.description,
                    "item_count": f.item_count,
                    "updated_at": f.updated_at.isoformat(),
                    "sources": list(f.sources),
                }
                for f in self._feeds
            ],
        }

    def load(self) -> None:
        """Read a previously saved registry; missing or invalid files are ignored."""
        if not self.path or not self.path.exists():
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            feeds = [
                FeedDescriptor(
                    name=record["name"],
                    category=Category(record["category"]) if record.get("category") else None,
                    url=record["url"],
                    path=record["path"],
                    item_count=record["item_count"],
                    sources=list(record.get("sources", [])),
                    description=record.get("description", ""),
                    updated_at=datetime.fromisoformat(record["updated_at"]),
                )
                for record in data.get("feeds", [])
            ]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load feed registry {self.path}, creating new one: {e}")
            return

        self._feeds = sorted(feeds, key=_sort_key)

    def save(self) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self.to_document(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info(f"Updated feed registry with {len(self._feeds)} feeds")
