"""Tests for the RSS feed writer."""

from pathlib import Path
from xml.etree import ElementTree as ET

import pytest

from conftest import BASE_TIME, make_item

from feed_aggregator.adapters.feeds import RSSFeedWriter
from feed_aggregator.adapters.feeds.rss_writer import image_type
from feed_aggregator.core import Category, ContentItem


def test_write_feed(tmp_path: Path) -> None:
    items = [
        make_item("Newest & best", hours_ago=1, description="First"),
        make_item("Older", hours_ago=2),
    ]
    writer = RSSFeedWriter(link="https://example.com", language="en", ttl=30)

    path = writer.write(items, "Technology News", "Tech feed", tmp_path / "out" / "technology.xml")

    root = ET.parse(path).getroot()
    channel = root.find("channel")
    assert root.get("version") == "2.0"
    assert channel.findtext("title") == "Technology News"
    assert channel.findtext("ttl") == "30"

    rendered = channel.findall("item")
    assert [i.findtext("title") for i in rendered] == ["Newest & best", "Older"]
    assert rendered[0].findtext("description") == "First"
    assert rendered[0].findtext("guid") == items[0].id
    assert rendered[0].findtext("pubDate") == "Wed, 15 Jan 2025 11:00:00 +0000"
    assert [c.text for c in rendered[0].findall("category")] == ["technology", "test source"]
    assert rendered[1].find("description") is None


def test_empty_feed_renders_channel() -> None:
    xml = RSSFeedWriter().render([], "Empty", "Nothing yet")
    channel = ET.fromstring(xml).find("channel")
    assert channel.findtext("title") == "Empty"
    assert channel.findall("item") == []


def test_enclosure_type_follows_image_extension() -> None:
    item = ContentItem.create(
        title="Launch photos",
        url="https://example.com/launch",
        category=Category.SCIENCE,
        source="Space Wire",
        published_at=BASE_TIME,
        image_url="https://img.example/launch.png?w=640",
    )

    xml = RSSFeedWriter().render([item], "Science", "Science feed")

    enclosure = ET.fromstring(xml).find("channel/item/enclosure")
    assert enclosure.get("url") == "https://img.example/launch.png?w=640"
    assert enclosure.get("type") == "image/png"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://img.example/a.gif", "image/gif"),
        ("https://img.example/a.JPG", "image/jpeg"),
        ("https://img.example/thumb", "image/jpeg"),
        ("https://img.example/clip.mp4", "image/jpeg"),
    ],
)
def test_image_type(url: str, expected: str) -> None:
    assert image_type(url) == expected
