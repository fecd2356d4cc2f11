"""Durable change-detection cache keyed by source and category."""

import hashlib
import json
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from feed_aggregator.core.entities import Category, ContentItem, to_utc, utc_now
from feed_aggregator.logger import get_logger

CACHE_VERSION = "1.0.0"

logger = get_logger(__name__)


def content_hash(item: ContentItem) -> str:
    """Fingerprint of the fields that make an item "the same story"."""
    content = "|".join([
        item.title,
        item.description or "",
        item.url,
        item.published_at.isoformat(),
    ])
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def aggregate_hash(hashes: list[str]) -> str:
    """Order-independent fingerprint of a set of item hashes."""
    return hashlib.md5("|".join(sorted(hashes)).encode("utf-8")).hexdigest()


def cache_key(source_id: str, category: Category) -> str:
    return f"{source_id}_{Category(category).value}"


@dataclass(frozen=True)
class CachedItem:
    """Stored item together with its content hash."""

    item: ContentItem
    content_hash: str


@dataclass
class CacheEntry:
    """Last-known-good item set for one (source, category) pair."""

    source_id: str
    category: Category
    last_update: datetime
    items: list[CachedItem]
    aggregate_hash: str

    @classmethod
    def build(cls, source_id: str, category: Category, items: list[ContentItem]) -> "CacheEntry":
        cached = [CachedItem(item=item, content_hash=content_hash(item)) for item in items]
        return cls(
            source_id=source_id,
            category=category,
            last_update=utc_now(),
            items=cached,
            aggregate_hash=aggregate_hash([c.content_hash for c in cached]),
        )

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (now or utc_now()) - self.last_update


def _item_to_record(cached: CachedItem) -> dict[str, Any]:
    item = cached.item
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "source": item.source,
        "url": item.url,
        "category": item.category.value,
        "tags": list(item.tags),
        "published_at": item.published_at.isoformat(),
        "scraped_at": item.scraped_at.isoformat(),
        "rank": item.rank,
        "image_url": item.image_url,
        "content_hash": cached.content_hash,
    }


def _item_from_record(record: dict[str, Any]) -> CachedItem:
    item = ContentItem(
        id=record["id"],
        title=record["title"],
        description=record.get("description"),
        source=record["source"],
        url=record["url"],
        category=Category(record["category"]),
        tags=tuple(record.get("tags") or ()),
        published_at=datetime.fromisoformat(record["published_at"]),
        scraped_at=datetime.fromisoformat(record["scraped_at"]),
        rank=record.get("rank"),
        image_url=record.get("image_url"),
    )
    return CachedItem(item=item, content_hash=record.get("content_hash") or content_hash(item))


def _aware(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp without timezone: {value}")
    return parsed


def _entry_to_record(entry: CacheEntry) -> dict[str, Any]:
    return {
        "source_id": entry.source_id,
        "category": entry.category.value,
        "last_update": entry.last_update.isoformat(),
        "items": [_item_to_record(c) for c in entry.items],
        "aggregate_hash": entry.aggregate_hash,
    }


def _entry_from_record(record: dict[str, Any]) -> CacheEntry:
    return CacheEntry(
        source_id=record["source_id"],
        category=Category(record["category"]),
        last_update=_aware(record["last_update"]),
        items=[_item_from_record(r) for r in record.get("items", [])],
        aggregate_hash=record["aggregate_hash"],
    )


class CacheStore:
    """Persisted mapping of ``{source_id}_{category}`` to cache entries.

    All access to the in-memory map and the durable file goes through one
    lock, so the store can be shared by concurrently running categories.
    Returned item lists are copies.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()
        self._entries: dict[str, CacheEntry] = {}
        self.version = CACHE_VERSION
        self.last_update = utc_now()
        self.load()

    def load(self) -> None:
        """Load the store from disk; missing or corrupt files give an empty store."""
        with self._lock:
            self._entries = {}
            self.last_update = utc_now()

            if not self.path.exists():
                return

            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                sources = dict(data["sources"])
                self.version = data.get("version", CACHE_VERSION)
                if data.get("last_update"):
                    self.last_update = to_utc(datetime.fromisoformat(data["last_update"]))
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Failed to load cache {self.path}, starting fresh: {e}")
                return

            for key, record in sources.items():
                try:
                    self._entries[key] = _entry_from_record(record)
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning(f"Skipping malformed cache entry {key}: {e}")

            logger.info(f"Loaded cache with {len(self._entries)} source caches")

    def persist(self) -> bool:
        """Atomically write the whole store to disk.

        Returns:
            True if the file was written; failures are logged, not raised
        """
        with self._lock:
            self.last_update = utc_now()
            document = {
                "version": self.version,
                "last_update": self.last_update.isoformat(),
                "sources": {key: _entry_to_record(e) for key, e in self._entries.items()},
            }

            tmp_name = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except OSError as e:
                logger.error(f"Failed to save cache {self.path}: {e}")
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                return False

            logger.debug(f"Saved cache with {len(self._entries)} source caches")
            return True

    def has_changed(self, source_id: str, category: Category, items: list[ContentItem]) -> bool:
        """Compare the aggregate hash of ``items`` with the stored one."""
        key = cache_key(source_id, category)
        candidate = aggregate_hash([content_hash(item) for item in items])

        with self._lock:
            entry = self._entries.get(key)

        if entry is None:
            logger.debug(f"No cache for {key}, treating as changed")
            return True

        changed = entry.aggregate_hash != candidate
        if changed:
            logger.debug(f"Changes detected for {key}: {entry.aggregate_hash} -> {candidate}")
        else:
            logger.debug(f"No changes for {key}: {entry.aggregate_hash}")
        return changed

    def update(self, source_id: str, category: Category, items: list[ContentItem]) -> CacheEntry:
        """Replace the stored entry wholesale."""
        entry = CacheEntry.build(source_id, Category(category), items)
        with self._lock:
            self._entries[cache_key(source_id, category)] = entry
        logger.debug(f"Updated cache for {source_id}/{entry.category.value} with {len(items)} items")
        return entry

    def read(self, source_id: str, category: Category) -> list[ContentItem]:
        """Items last stored for the pair, empty if none."""
        with self._lock:
            entry = self._entries.get(cache_key(source_id, category))
            if entry is None:
                return []
            return [c.item for c in entry.items]

    def entry(self, source_id: str, category: Category) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(cache_key(source_id, category))

    def stats(self) -> dict:
        """Summary of what the cache holds."""
        with self._lock:
            sources = [
                {
                    "source_id": e.source_id,
                    "category": e.category.value,
                    "item_count": len(e.items),
                    "last_update": e.last_update,
                }
                for e in self._entries.values()
            ]
            return {
                "total_sources": len(sources),
                "total_items": sum(s["item_count"] for s in sources),
                "last_update": self.last_update,
                "sources": sources,
            }

    def oldest_age(self) -> timedelta:
        """Age of the stalest entry, zero when the cache is empty."""
        with self._lock:
            if not self._entries:
                return timedelta(0)
            oldest = min(e.last_update for e in self._entries.values())
        return utc_now() - oldest

    def clear(self) -> None:
        with self._lock:
            self._entries = {}
            self.last_update = utc_now()
        logger.info("Cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
