"""Generic RSS 2.0 / Atom feed source."""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
from xml.etree import ElementTree as ET

from bs4 import BeautifulSoup

from feed_aggregator.adapters.sources.base import ConfiguredSource
from feed_aggregator.config import CategoryConfig
from feed_aggregator.core import ContentItem
from feed_aggregator.logger import get_logger

ATOM_NS = "{http://www.w3.org/2005/Atom}"
MEDIA_NS = "{http://search.yahoo.com/mrss/}"

logger = get_logger(__name__)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse RFC 822 (RSS) or ISO 8601 (Atom) dates into UTC."""
    if not value:
        return None
    value = value.strip()

    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def strip_html(text: str) -> str:
    if not text:
        return ""
    text = BeautifulSoup(text, "html.parser").get_text(separator=" ", strip=True)
    return re.sub(r"\s+", " ", text)


def _text(element: Optional[ET.Element]) -> str:
    if element is None or element.text is None:
        return ""
    return element.text.strip()


class RSSSource(ConfiguredSource):
    """Fetch items from an RSS or Atom feed endpoint."""

    async def _fetch(self, category_config: CategoryConfig) -> list[ContentItem]:
        async with self.client() as client:
            response = await client.get(self.url_for(category_config.endpoint))
            response.raise_for_status()

        entries = self.parse_feed(response.text)
        items = []
        for entry in entries:
            if len(items) >= category_config.max_items:
                break
            try:
                items.append(self.create_item(
                    title=entry["title"],
                    url=entry["link"],
                    category=category_config.category,
                    published_at=entry["published"],
                    description=entry["description"] or None,
                    image_url=entry["image"],
                    rank=len(items) + 1,
                ))
            except (ValueError, KeyError) as e:
                logger.debug(f"Skipping malformed entry from {self.source_id}: {e}")
        return items

    def parse_feed(self, xml_content: str) -> list[dict]:
        """Parse RSS 2.0 ``<item>`` or Atom ``<entry>`` elements.

        Raises:
            ET.ParseError: if the document is not well-formed XML
        """
        root = ET.fromstring(xml_content)

        if root.tag == f"{ATOM_NS}feed":
            return self._parse_atom(root)
        return self._parse_rss(root)

    def _parse_rss(self, root: ET.Element) -> list[dict]:
        entries = []
        for item in root.iter("item"):
            title = strip_html(_text(item.find("title")))
            link = _text(item.find("link")) or _text(item.find("guid"))
            if not title or not link:
                continue

            image = None
            enclosure = item.find("enclosure")
            if enclosure is not None and enclosure.get("type", "").startswith("image"):
                image = enclosure.get("url")
            thumbnail = item.find(f"{MEDIA_NS}thumbnail")
            if image is None and thumbnail is not None:
                image = thumbnail.get("url")

            entries.append({
                "title": title,
                "link": link,
                "description": strip_html(_text(item.find("description"))),
                "published": parse_date(_text(item.find("pubDate"))),
                "image": image,
            })
        return entries

    def _parse_atom(self, root: ET.Element) -> list[dict]:
        entries = []
        for entry in root.iter(f"{ATOM_NS}entry"):
            title = strip_html(_text(entry.find(f"{ATOM_NS}title")))

            link = ""
            for link_elem in entry.findall(f"{ATOM_NS}link"):
                if link_elem.get("rel", "alternate") == "alternate":
                    link = link_elem.get("href", "")
                    break
            if not title or not link:
                continue

            summary = _text(entry.find(f"{ATOM_NS}summary")) or _text(entry.find(f"{ATOM_NS}content"))
            published = _text(entry.find(f"{ATOM_NS}published")) or _text(entry.find(f"{ATOM_NS}updated"))

            entries.append({
                "title": title,
                "link": link,
                "description": strip_html(summary),
                "published": parse_date(published),
                "image": None,
            })
        return entries
