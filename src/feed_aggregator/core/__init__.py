"""Core domain layer."""

from feed_aggregator.core.cache_store import CacheEntry, CacheStore
from feed_aggregator.core.consolidator import Consolidator, normalize_title
from feed_aggregator.core.entities import (
    Category,
    ContentItem,
    FeedDescriptor,
    RunSummary,
    ScrapeResult,
    SourceOutcome,
)
from feed_aggregator.core.interfaces import FeedWriter, SourceAdapter
from feed_aggregator.core.orchestrator import ScrapeOrchestrator
from feed_aggregator.core.rate_limiter import RateLimiter
from feed_aggregator.core.registry import MASTER_FEED_NAME, FeedRegistry

__all__ = [
    "Category",
    "ContentItem",
    "ScrapeResult",
    "FeedDescriptor",
    "SourceOutcome",
    "RunSummary",
    "SourceAdapter",
    "FeedWriter",
    "RateLimiter",
    "CacheEntry",
    "CacheStore",
    "ScrapeOrchestrator",
    "Consolidator",
    "normalize_title",
    "FeedRegistry",
    "MASTER_FEED_NAME",
]
