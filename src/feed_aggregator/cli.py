"""CLI entry point for the feed aggregator."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from feed_aggregator.adapters.feeds import RSSFeedWriter
from feed_aggregator.adapters.sources import build_sources
from feed_aggregator.config import ConfigError, Settings, get_settings
from feed_aggregator.core import CacheStore, FeedRegistry, RunSummary
from feed_aggregator.logger import setup_logger
from feed_aggregator.use_cases import Aggregator

cli = typer.Typer(help="Aggregate content sources into RSS feeds.", no_args_is_help=True)


def app() -> None:
    """CLI entry point."""
    cli()


def build_aggregator(settings: Settings) -> Aggregator:
    """Construct every collaborator once and inject it."""
    cache = CacheStore(settings.cache.path)
    registry = FeedRegistry(settings.registry_path, base_url=settings.global_.base_url)
    registry.load()
    writer = RSSFeedWriter(link=settings.global_.base_url, language=settings.global_.language)
    return Aggregator(
        settings=settings,
        adapters=build_sources(settings.enabled_sources),
        cache=cache,
        feed_writer=writer,
        registry=registry,
    )


def _load(config: Optional[Path], debug: bool = False) -> tuple[Settings, Aggregator]:
    try:
        settings = get_settings(config)
        if debug:
            settings.logging.level = "DEBUG"
        setup_logger(
            level=settings.logging.level,
            log_file=settings.logging.file,
            rotation=settings.logging.rotation,
            retention=settings.logging.retention,
        )
        return settings, build_aggregator(settings)
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        raise typer.Exit(code=2)


def print_summary(summary: RunSummary) -> None:
    print("\n" + "=" * 70)
    print("📊 RUN SUMMARY")
    print("=" * 70)

    for outcome in summary.outcomes:
        if not outcome.success:
            print(f"  ❌ {outcome.source} / {outcome.category.value}: {outcome.error}")
        elif outcome.from_cache:
            print(f"  📦 {outcome.source} / {outcome.category.value}: {outcome.item_count} items (cached)")
        else:
            print(f"  ✅ {outcome.source} / {outcome.category.value}: {outcome.item_count} items")

    print(f"\n✓ Sources: {summary.succeeded}/{len(summary.outcomes)} succeeded")
    print(f"✓ Items: {summary.total_items}")
    print(f"✓ Feeds written: {len(summary.feeds_written)}")
    for error in summary.feed_errors:
        print(f"⚠️  {error}")


@cli.command()
def run(
    categories: Optional[str] = typer.Option(None, help="Comma separated category filter"),
    config: Optional[Path] = typer.Option(None, help="Path to config.yaml"),
    debug: bool = False,
) -> None:
    """Fetch all sources and write feeds."""
    settings, aggregator = _load(config, debug)

    print("\n" + "=" * 70)
    print("🚀 FEED AGGREGATOR")
    print("=" * 70)
    print(f"  • Sources: {len(aggregator.adapters)}")
    print(f"  • Categories: {', '.join(c.value for c in settings.enabled_categories)}")
    print(f"  • Output: {settings.output_dir}")

    category_filter = [c.strip() for c in categories.split(",") if c.strip()] if categories else None
    if category_filter:
        print(f"  • Filter: {', '.join(category_filter)}")

    try:
        summary = asyncio.run(aggregator.run(category_filter))
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        raise typer.Exit(code=2)

    print_summary(summary)


@cli.command()
def check(
    config: Optional[Path] = typer.Option(None, help="Path to config.yaml"),
    run_if_changed: bool = typer.Option(False, "--run", help="Run immediately when changes are likely"),
) -> None:
    """Exit 0 when cached data is stale and a run is warranted, 1 otherwise."""
    _, aggregator = _load(config)

    if not aggregator.check_for_changes():
        print("✅ No changes expected")
        raise typer.Exit(code=1)

    print("⏰ Changes likely")
    if run_if_changed:
        print_summary(asyncio.run(aggregator.run()))


@cli.command()
def stats(config: Optional[Path] = typer.Option(None, help="Path to config.yaml")) -> None:
    """Show cache statistics."""
    settings, aggregator = _load(config)
    cache_stats = aggregator.cache.stats()

    print("\n📊 Aggregation Statistics:")
    print(f"  Sources: {len(aggregator.adapters)}")
    print(f"  Categories: {len(settings.enabled_categories)}")
    print(f"  Output Directory: {settings.output_dir}")

    print("\n📦 Cache Statistics:")
    print(f"  Cached Sources: {cache_stats['total_sources']}")
    print(f"  Cached Items: {cache_stats['total_items']}")
    if cache_stats["total_sources"]:
        hours = aggregator.cache.oldest_age().total_seconds() / 3600
        print(f"  Oldest cache: {hours:.1f} hours ago")
        print("\n📋 Source Cache Details:")
        for source in cache_stats["sources"]:
            print(f"  {source['source_id']}/{source['category']}: {source['item_count']} items "
                  f"(updated {source['last_update'].strftime('%Y-%m-%d %H:%M')})")


@cli.command("clear-cache")
def clear_cache(config: Optional[Path] = typer.Option(None, help="Path to config.yaml")) -> None:
    """Drop all cached items."""
    _, aggregator = _load(config)
    aggregator.cache.clear()
    aggregator.cache.persist()
    print("🗑️  Cache cleared")


if __name__ == "__main__":
    app()
