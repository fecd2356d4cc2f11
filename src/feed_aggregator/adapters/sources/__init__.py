"""Source adapters for fetching items."""

from typing import Optional

import httpx

from feed_aggregator.adapters.sources.base import ConfiguredSource
from feed_aggregator.adapters.sources.hackernews_source import HackerNewsSource
from feed_aggregator.adapters.sources.reddit_source import RedditSource
from feed_aggregator.adapters.sources.rss_source import RSSSource
from feed_aggregator.config import ConfigError, SourceConfig

# API and scraper adapters are looked up by source id, RSS feeds by type.
SOURCES_BY_ID: dict[str, type[ConfiguredSource]] = {
    "hackernews": HackerNewsSource,
    "reddit": RedditSource,
}


def register_source(source_id: str, source_class: type[ConfiguredSource]) -> None:
    SOURCES_BY_ID[source_id] = source_class


def build_source(
    config: SourceConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ConfiguredSource:
    """Construct the adapter for a source record.

    Raises:
        ConfigError: if no adapter exists for the source
    """
    if config.type == "rss":
        return RSSSource(config, transport=transport)

    source_class = SOURCES_BY_ID.get(config.id)
    if source_class is None:
        raise ConfigError(f"Unsupported {config.type} source: {config.id}")
    return source_class(config, transport=transport)


def build_sources(configs: list[SourceConfig]) -> list[ConfiguredSource]:
    return [build_source(c) for c in configs if c.enabled]


__all__ = [
    "ConfiguredSource",
    "RSSSource",
    "HackerNewsSource",
    "RedditSource",
    "build_source",
    "build_sources",
    "register_source",
]
