"""RSS 2.0 feed writer."""

import mimetypes
from email.utils import format_datetime
from pathlib import Path
from urllib.parse import urlparse
from xml.etree import ElementTree as ET

from feed_aggregator.core import ContentItem, FeedWriter
from feed_aggregator.core.entities import utc_now


def image_type(url: str) -> str:
    """MIME type guessed from the URL path, JPEG when unknown."""
    guessed, _ = mimetypes.guess_type(urlparse(url).path)
    if guessed and guessed.startswith("image/"):
        return guessed
    return "image/jpeg"


class RSSFeedWriter(FeedWriter):
    """Render items as an RSS 2.0 document."""

    def __init__(self, link: str = "", language: str = "en", ttl: int = 60) -> None:
        self.link = link
        self.language = language
        self.ttl = ttl

    def render(self, items: list[ContentItem], title: str, description: str) -> str:
        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")

        ET.SubElement(channel, "title").text = title
        ET.SubElement(channel, "description").text = description
        ET.SubElement(channel, "link").text = self.link
        ET.SubElement(channel, "language").text = self.language
        ET.SubElement(channel, "lastBuildDate").text = format_datetime(utc_now())
        ET.SubElement(channel, "ttl").text = str(self.ttl)

        for item in items:
            channel.append(self._render_item(item))

        ET.indent(rss)
        return ET.tostring(rss, encoding="utf-8", xml_declaration=True).decode("utf-8")

    def _render_item(self, item: ContentItem) -> ET.Element:
        element = ET.Element("item")
        ET.SubElement(element, "title").text = item.title
        ET.SubElement(element, "link").text = item.url
        ET.SubElement(element, "guid", {"isPermaLink": "false"}).text = item.id
        if item.description:
            ET.SubElement(element, "description").text = item.description
        ET.SubElement(element, "pubDate").text = format_datetime(item.published_at)
        ET.SubElement(element, "source").text = item.source
        for tag in item.tags:
            ET.SubElement(element, "category").text = tag
        if item.image_url:
            ET.SubElement(
                element, "enclosure", {"url": item.image_url, "type": image_type(item.image_url), "length": "0"}
            )
        return element

    def write(self, items: list[ContentItem], title: str, description: str, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(items, title, description), encoding="utf-8")
        return path
