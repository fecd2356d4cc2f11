"""Feed output adapters."""

from feed_aggregator.adapters.feeds.markdown_registry import (
    render_registry_markdown,
    save_registry_markdown,
)
from feed_aggregator.adapters.feeds.rss_writer import RSSFeedWriter

__all__ = ["RSSFeedWriter", "render_registry_markdown", "save_registry_markdown"]
