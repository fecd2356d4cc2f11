"""Core domain entities."""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Category(str, Enum):
    """Topical partition shared by sources and output feeds."""

    GENERAL = "general"
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    SPORTS = "sports"
    SCIENCE = "science"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"
    WORLD = "world"
    POLITICS = "politics"
    BREAKING = "breaking"
    CRYPTO = "crypto"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def make_item_id(title: str, source: str) -> str:
    """Stable identifier derived from title and source name."""
    return hashlib.md5(f"{title}-{source}".encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class ContentItem:
    """One piece of content fetched from a source."""

    id: str
    title: str
    source: str
    url: str
    category: Category
    published_at: datetime
    scraped_at: datetime
    description: Optional[str] = None
    tags: tuple[str, ...] = ()
    rank: Optional[int] = None
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("Title cannot be empty")
        if not self.url:
            raise ValueError("URL cannot be empty")
        if self.published_at.tzinfo is None or self.scraped_at.tzinfo is None:
            raise ValueError("Timestamps must be timezone-aware")
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "published_at", to_utc(self.published_at))
        object.__setattr__(self, "scraped_at", to_utc(self.scraped_at))
        object.__setattr__(self, "tags", tuple(self.tags))

    @classmethod
    def create(
        cls,
        title: str,
        url: str,
        category: Category,
        source: str,
        published_at: Optional[datetime] = None,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
        rank: Optional[int] = None,
    ) -> "ContentItem":
        """Build an item the way adapters do at fetch time."""
        title = (title or "").strip()
        now = utc_now()
        return cls(
            id=make_item_id(title, source),
            title=title,
            description=description.strip() if description else None,
            source=source,
            url=url,
            category=category,
            tags=(category.value, source.lower()),
            published_at=to_utc(published_at) if published_at else now,
            scraped_at=now,
            rank=rank,
            image_url=image_url,
        )


@dataclass
class ScrapeResult:
    """Outcome of one adapter's attempt for one category."""

    success: bool
    items: list[ContentItem]
    source: str
    source_id: str
    category: Category
    timestamp: datetime = field(default_factory=utc_now)
    error: Optional[str] = None
    from_cache: bool = False

    @classmethod
    def ok(
        cls,
        items: list[ContentItem],
        source: str,
        source_id: str,
        category: Category,
        from_cache: bool = False,
    ) -> "ScrapeResult":
        return cls(
            success=True,
            items=list(items),
            source=source,
            source_id=source_id,
            category=category,
            from_cache=from_cache,
        )

    @classmethod
    def failed(
        cls, error: str, source: str, source_id: str, category: Category
    ) -> "ScrapeResult":
        return cls(
            success=False,
            items=[],
            source=source,
            source_id=source_id,
            category=category,
            error=error,
        )


@dataclass
class FeedDescriptor:
    """Registry record for one written feed artifact."""

    name: str
    category: Optional[Category]
    url: str
    path: str
    item_count: int
    sources: list[str]
    description: str = ""
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def key(self) -> tuple[str, Optional[Category]]:
        return (self.name, self.category)


@dataclass
class SourceOutcome:
    """Per (source, category) line of a run summary."""

    source: str
    category: Category
    success: bool
    item_count: int = 0
    from_cache: bool = False
    error: Optional[str] = None


@dataclass
class RunSummary:
    """What a full aggregation run produced."""

    outcomes: list[SourceOutcome] = field(default_factory=list)
    feeds_written: list[FeedDescriptor] = field(default_factory=list)
    feed_errors: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    @property
    def total_items(self) -> int:
        return sum(o.item_count for o in self.outcomes)
