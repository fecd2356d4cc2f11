"""Hacker News Firebase API source."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from feed_aggregator.adapters.sources.base import ConfiguredSource
from feed_aggregator.config import CategoryConfig
from feed_aggregator.core import ContentItem
from feed_aggregator.logger import get_logger

MIN_SCORE = 5
SKIP_PREFIXES = ("ask hn:", "tell hn:", "show hn:", "poll:")

logger = get_logger(__name__)


class HackerNewsSource(ConfiguredSource):
    """Top stories from the Hacker News API."""

    async def _fetch(self, category_config: CategoryConfig) -> list[ContentItem]:
        max_items = category_config.max_items

        async with self.client() as client:
            response = await client.get(self.url_for(category_config.endpoint))
            response.raise_for_status()
            story_ids = response.json()[: min(max_items * 2, 30)]

            stories = await asyncio.gather(*(self._fetch_story(client, sid) for sid in story_ids))

        valid = [s for s in stories if s is not None and self.is_valid_story(s)][:max_items]

        items = []
        for rank, story in enumerate(valid, 1):
            url = story.get("url") or f"https://news.ycombinator.com/item?id={story['id']}"
            items.append(self.create_item(
                title=story["title"],
                url=url,
                category=category_config.category,
                published_at=datetime.fromtimestamp(story["time"], tz=timezone.utc),
                description=self.describe(story),
                rank=rank,
            ))
        return items

    async def _fetch_story(self, client: httpx.AsyncClient, story_id: int) -> Optional[dict]:
        try:
            response = await client.get(self.url_for(f"/item/{story_id}.json"), timeout=10.0)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Failed to fetch story {story_id}: {e}")
            return None

    @staticmethod
    def is_valid_story(story: dict) -> bool:
        title = story.get("title")
        if not title or story.get("type") != "story" or "time" not in story:
            return False
        if story.get("score", 0) < MIN_SCORE:
            return False
        return not title.lower().startswith(SKIP_PREFIXES)

    @staticmethod
    def describe(story: dict) -> str:
        parts = []
        if story.get("score"):
            parts.append(f"{story['score']} points")
        if story.get("descendants"):
            parts.append(f"{story['descendants']} comments")
        if story.get("by"):
            parts.append(f"by {story['by']}")
        parts.append("on Hacker News")

        text = story.get("text")
        if text:
            clean = BeautifulSoup(text, "html.parser").get_text(separator=" ", strip=True)
            if 0 < len(clean) < 200:
                parts.append(f"- {clean[:150]}...")

        return " ".join(parts)
