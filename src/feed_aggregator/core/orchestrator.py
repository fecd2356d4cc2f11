"""Concurrent per-category fetching with cache fallback."""

import asyncio
from typing import Optional

from feed_aggregator.core.cache_store import CacheStore
from feed_aggregator.core.entities import Category, ScrapeResult, utc_now
from feed_aggregator.core.interfaces import SourceAdapter
from feed_aggregator.logger import get_logger

logger = get_logger(__name__)


class ScrapeOrchestrator:
    """Drive every adapter for a category and settle each against the cache.

    Adapters run concurrently and settle independently: a failing or slow
    adapter never cancels its siblings. The cache is persisted once per
    batch.
    """

    def __init__(
        self,
        adapters: list[SourceAdapter],
        cache: CacheStore,
        fetch_timeout: Optional[float] = None,
    ) -> None:
        self.adapters = adapters
        self.cache = cache
        self.fetch_timeout = fetch_timeout

    def adapters_for(self, category: Category) -> list[SourceAdapter]:
        return [a for a in self.adapters if a.supports_category(category)]

    async def scrape_category(self, category: Category) -> list[ScrapeResult]:
        """Produce one result per adapter supporting ``category``."""
        adapters = self.adapters_for(category)
        if not adapters:
            logger.info(f"No sources support {category.value}")
            return []

        outcomes = await asyncio.gather(
            *(self._fetch(adapter, category) for adapter in adapters),
            return_exceptions=True,
        )

        results = []
        for adapter, outcome in zip(adapters, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                outcome = ScrapeResult.failed(
                    f"{type(outcome).__name__}: {outcome}",
                    source=adapter.name,
                    source_id=adapter.source_id,
                    category=category,
                )
            results.append(self._settle(adapter, category, outcome))

        await asyncio.to_thread(self.cache.persist)
        return results

    async def _fetch(self, adapter: SourceAdapter, category: Category) -> ScrapeResult:
        if self.fetch_timeout is None:
            return await adapter.fetch_category(category)
        try:
            return await asyncio.wait_for(adapter.fetch_category(category), self.fetch_timeout)
        except asyncio.TimeoutError:
            return ScrapeResult.failed(
                f"Timed out after {self.fetch_timeout:g}s",
                source=adapter.name,
                source_id=adapter.source_id,
                category=category,
            )

    def _settle(self, adapter: SourceAdapter, category: Category, result: ScrapeResult) -> ScrapeResult:
        """Apply the fresh-vs-cached decision for one adapter outcome."""
        source_id = adapter.source_id
        label = f"{source_id}/{category.value}"

        if result.success:
            if self.cache.has_changed(source_id, category, result.items):
                self.cache.update(source_id, category, result.items)
                logger.info(f"{label}: {len(result.items)} items (updated)")
                return result

            cached = self.cache.read(source_id, category)
            logger.info(f"{label}: {len(cached)} items (cached)")
            return ScrapeResult.ok(
                cached, source=result.source, source_id=source_id, category=category, from_cache=True
            )

        cached = self.cache.read(source_id, category)
        if cached:
            logger.warning(
                f"{label}: serving {len(cached)} cached items, fetch failed: {result.error}"
            )
            return ScrapeResult.ok(
                cached, source=adapter.name, source_id=source_id, category=category, from_cache=True
            )

        logger.error(f"{label}: fetch failed and no cache to fall back to: {result.error}")
        return result

    def has_likely_changes(self, category: Category) -> bool:
        """Check cache ages against refresh intervals, without network I/O."""
        now = utc_now()
        changed = False

        for adapter in self.adapters_for(category):
            label = f"{adapter.source_id}/{category.value}"
            entry = self.cache.entry(adapter.source_id, category)
            if entry is None:
                logger.info(f"No cache found for {label}, changes assumed")
                changed = True
                continue

            age = entry.age(now)
            interval = adapter.refresh_interval(category)
            age_minutes = round(age.total_seconds() / 60)
            if age > interval:
                logger.info(
                    f"Cache for {label} is {age_minutes}min old "
                    f"(>{interval.total_seconds() / 60:g}min), changes likely"
                )
                changed = True
            else:
                logger.debug(f"Cache for {label} is fresh ({age_minutes}min old)")

        return changed
