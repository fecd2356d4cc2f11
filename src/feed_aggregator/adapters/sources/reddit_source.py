"""Reddit subreddit listing source."""

from datetime import datetime, timezone
from typing import Optional

from feed_aggregator.adapters.sources.base import ConfiguredSource
from feed_aggregator.config import CategoryConfig
from feed_aggregator.core import ContentItem
from feed_aggregator.logger import get_logger

MIN_SCORE = 10
SPAM_KEYWORDS = ("upvote", "karma", "reddit gold", "cake day")
PLACEHOLDER_THUMBNAILS = ("self", "default", "nsfw", "spoiler")

logger = get_logger(__name__)


class RedditSource(ConfiguredSource):
    """Posts from a subreddit's public JSON listing."""

    async def _fetch(self, category_config: CategoryConfig) -> list[ContentItem]:
        async with self.client() as client:
            response = await client.get(self.url_for(category_config.endpoint))
            response.raise_for_status()
            posts = response.json()["data"]["children"]

        candidates = [p.get("data", {}) for p in posts[: category_config.max_items]]
        valid = [d for d in candidates if d.get("title") and not self.is_low_quality(d)]

        items = []
        for data in valid:
            try:
                url = f"https://reddit.com{data['permalink']}" if data.get("is_self") else data.get("url")
                items.append(self.create_item(
                    title=data["title"],
                    url=url,
                    category=category_config.category,
                    published_at=datetime.fromtimestamp(data["created_utc"], tz=timezone.utc),
                    description=self.describe(data),
                    image_url=self.image_url(data.get("thumbnail")),
                    rank=len(items) + 1,
                ))
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping malformed post from {self.source_id}: {e}")
        return items

    @staticmethod
    def is_low_quality(data: dict) -> bool:
        if data.get("score", 0) < MIN_SCORE:
            return True
        title = data["title"].lower()
        if "[deleted]" in title or "[removed]" in title:
            return True
        return any(keyword in title for keyword in SPAM_KEYWORDS)

    @staticmethod
    def describe(data: dict) -> str:
        parts = []
        if data.get("score"):
            parts.append(f"{data['score']} upvotes")
        if data.get("num_comments"):
            parts.append(f"{data['num_comments']} comments")
        parts.append(f"from r/{data.get('subreddit', '')}")

        selftext = data.get("selftext") or ""
        if 0 < len(selftext) < 200:
            parts.append(f"- {selftext[:150]}...")
        return " ".join(parts)

    @staticmethod
    def image_url(thumbnail: Optional[str]) -> Optional[str]:
        if not thumbnail or thumbnail in PLACEHOLDER_THUMBNAILS or not thumbnail.startswith("http"):
            return None
        return thumbnail
