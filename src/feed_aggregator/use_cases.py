"""Business logic use cases."""

import asyncio
from pathlib import Path
from typing import Iterable, Optional

from feed_aggregator.adapters.feeds import save_registry_markdown
from feed_aggregator.config import ConfigError, Settings, parse_category
from feed_aggregator.core import (
    MASTER_FEED_NAME,
    CacheStore,
    Category,
    Consolidator,
    ContentItem,
    FeedDescriptor,
    FeedRegistry,
    FeedWriter,
    RunSummary,
    ScrapeOrchestrator,
    ScrapeResult,
    SourceAdapter,
    SourceOutcome,
)
from feed_aggregator.core.registry import describe_feed
from feed_aggregator.logger import get_logger

logger = get_logger(__name__)


class Aggregator:
    """Wire sources, cache, consolidation and feed output into one run."""

    def __init__(
        self,
        settings: Settings,
        adapters: list[SourceAdapter],
        cache: CacheStore,
        feed_writer: FeedWriter,
        registry: FeedRegistry,
    ) -> None:
        self.settings = settings
        self.adapters = adapters
        self.cache = cache
        self.feed_writer = feed_writer
        self.registry = registry
        self.orchestrator = ScrapeOrchestrator(
            adapters, cache, fetch_timeout=settings.global_.fetch_timeout
        )
        self.consolidator = Consolidator(settings.global_.max_items_per_feed)

    def resolve_categories(self, category_filter: Optional[Iterable[str]] = None) -> list[Category]:
        """Enabled categories, narrowed by an optional filter.

        Raises:
            ConfigError: if the filter names an unknown category
        """
        enabled = list(self.settings.enabled_categories)
        if not category_filter:
            return enabled

        wanted = {parse_category(c) for c in category_filter}
        return [c for c in enabled if c in wanted]

    async def run(self, category_filter: Optional[Iterable[str]] = None) -> RunSummary:
        """Fetch every enabled category and write all feeds.

        Adapter and feed-writing failures are recorded in the summary; only
        configuration errors propagate.
        """
        summary = RunSummary()
        categories = self.resolve_categories(category_filter)
        if not categories:
            available = ", ".join(c.value for c in self.settings.enabled_categories)
            logger.warning(f"No enabled categories match the filter. Available categories: {available}")
            return summary

        logger.info(f"Starting sources for categories: {', '.join(c.value for c in categories)}")

        outcomes = await asyncio.gather(
            *(self._process_category(category, summary) for category in categories),
            return_exceptions=True,
        )

        category_items: list[list[ContentItem]] = []
        for category, outcome in zip(categories, outcomes):
            if isinstance(outcome, Exception):
                logger.opt(exception=outcome).error(f"Category {category.value} failed")
                summary.feed_errors.append(f"{category.value}: {outcome}")
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            category_items.append(outcome)

        master_items = self.consolidator.merge(category_items)
        if master_items:
            await self._write_feed(
                name=MASTER_FEED_NAME,
                category=None,
                items=master_items,
                relative_path=Path("master.xml"),
                title="All News",
                summary=summary,
            )

        await asyncio.to_thread(self.save_registry)

        logger.info(
            f"Run complete: {summary.succeeded}/{len(summary.outcomes)} sources, "
            f"{summary.total_items} items, {len(summary.feeds_written)} feeds written"
        )
        return summary

    async def _process_category(self, category: Category, summary: RunSummary) -> list[ContentItem]:
        results = await self.orchestrator.scrape_category(category)

        for result in results:
            summary.outcomes.append(SourceOutcome(
                source=result.source,
                category=category,
                success=result.success,
                item_count=len(result.items),
                from_cache=result.from_cache,
                error=result.error,
            ))

            if not result.success:
                logger.warning(f"{result.source} failed for {category.value}: {result.error}")
                continue
            if not result.items:
                logger.info(f"No items found for {result.source} {category.value}")
                continue
            await self._write_source_feed(result, summary)

        items = self.consolidator.consolidate(results)
        if items:
            await self._write_feed(
                name=f"{category.label} Feed",
                category=category,
                items=items,
                relative_path=Path(f"{category.value}.xml"),
                title=f"{category.label} News",
                summary=summary,
            )
        return items

    async def _write_source_feed(self, result: ScrapeResult, summary: RunSummary) -> None:
        category = result.category
        await self._write_feed(
            name=f"{result.source} - {category.label}",
            category=category,
            items=result.items,
            relative_path=Path(category.value) / f"{result.source_id}.xml",
            title=f"{result.source} - {category.label}",
            summary=summary,
        )

    async def _write_feed(
        self,
        name: str,
        category: Optional[Category],
        items: list[ContentItem],
        relative_path: Path,
        title: str,
        summary: RunSummary,
    ) -> Optional[FeedDescriptor]:
        sources = sorted({item.source for item in items})
        descriptor = FeedDescriptor(
            name=name,
            category=category,
            url=self.registry.url_for(relative_path.as_posix()),
            path=str(self.settings.output_dir / relative_path),
            item_count=len(items),
            sources=sources,
            description=describe_feed(category, sources),
        )

        try:
            await asyncio.to_thread(
                self.feed_writer.write, items, title, descriptor.description, Path(descriptor.path)
            )
        except OSError as e:
            logger.error(f"Failed to write feed {descriptor.path}: {e}")
            summary.feed_errors.append(f"{name}: {e}")
            return None

        self.registry.upsert(descriptor)
        logger.info(f"Generated {name} feed with {len(items)} items")
        summary.feeds_written.append(descriptor)
        return descriptor

    def save_registry(self) -> None:
        try:
            self.registry.save()
            save_registry_markdown(self.registry, self.settings.docs_dir / "FEEDS.md")
        except OSError as e:
            logger.error(f"Failed to save feed registry: {e}")

    def check_for_changes(self) -> bool:
        """Cheap pre-flight: is any enabled category likely stale?"""
        categories = self.settings.enabled_categories
        logger.info(f"Quick cache check for categories: {', '.join(c.value for c in categories)}")

        changed = False
        for category in categories:
            if self.orchestrator.has_likely_changes(category):
                changed = True

        logger.info(f"Quick check result: {'changes likely' if changed else 'no changes expected'}")
        return changed


__all__ = ["Aggregator", "ConfigError"]
