"""Markdown rendering of the feed registry."""

from pathlib import Path

from feed_aggregator.core import FeedRegistry


def render_registry_markdown(registry: FeedRegistry) -> str:
    """Generate FEEDS.md content from the registry."""
    feeds = registry.feeds
    updated = registry.last_updated.strftime("%Y-%m-%d %H:%M UTC")

    lines = [
        "# RSS Feeds Registry",
        "",
        f"> **Last Updated:** {updated}",
        f"> **Total Feeds:** {len(feeds)}",
        f"> **Update Frequency:** {registry.update_frequency}",
        "",
    ]

    if not feeds:
        lines.append("No feeds have been generated yet.")
        return "\n".join(lines) + "\n"

    lines.extend(["## Available RSS Feeds", ""])
    for feed in feeds:
        lines.extend([
            f"### {feed.name}",
            f"- **URL:** `{feed.url}`",
            f"- **Description:** {feed.description}",
            f"- **Items:** {feed.item_count}",
            f"- **Sources:** {', '.join(feed.sources)}",
            f"- **Last Updated:** {feed.updated_at.strftime('%Y-%m-%d %H:%M UTC')}",
            "",
        ])

    lines.extend(["## Quick Copy URLs", "", "```"])
    lines.extend(feed.url for feed in feeds)
    lines.extend(["```", ""])

    return "\n".join(lines)


def save_registry_markdown(registry: FeedRegistry, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_registry_markdown(registry), encoding="utf-8")
