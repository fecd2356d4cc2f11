"""Cross-source merge of scrape results."""

import re

from feed_aggregator.core.entities import ContentItem, ScrapeResult

TITLE_KEY_LENGTH = 100


def normalize_title(title: str) -> str:
    """Dedup key: lowercase, no punctuation, single spaces, fixed prefix."""
    key = re.sub(r"[^\w\s]", "", title.lower())
    key = re.sub(r"\s+", " ", key).strip()
    return key[:TITLE_KEY_LENGTH]


class Consolidator:
    """Deduplicate, sort newest first and truncate.

    The first item seen for a title key wins, so callers decide precedence
    by the order of the results they pass in.
    """

    def __init__(self, max_items: int = 50) -> None:
        self.max_items = max_items

    def consolidate(self, results: list[ScrapeResult]) -> list[ContentItem]:
        return self.merge([r.items for r in results if r.success])

    def merge(self, item_lists: list[list[ContentItem]]) -> list[ContentItem]:
        seen: set[str] = set()
        merged: list[ContentItem] = []

        for items in item_lists:
            for item in items:
                key = normalize_title(item.title)
                if key in seen:
                    continue
                seen.add(key)
                merged.append(item)

        # sorted() is stable; reverse keeps equal timestamps in input order
        merged = sorted(merged, key=lambda item: item.published_at, reverse=True)
        return merged[: self.max_items]
