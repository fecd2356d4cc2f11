"""Tests for the Hacker News and Reddit API sources."""

import httpx
import pytest

from feed_aggregator.adapters.sources import HackerNewsSource, RedditSource
from feed_aggregator.config import CategoryConfig, SourceConfig
from feed_aggregator.core import Category

STORIES = {
    1: {"id": 1, "type": "story", "title": "Postgres 18 released", "url": "https://pg.example",
        "by": "alice", "time": 1736935200, "score": 250, "descendants": 80},
    2: {"id": 2, "type": "story", "title": "Ask HN: Favourite editor?", "by": "bob",
        "time": 1736935100, "score": 90},
    3: {"id": 3, "type": "story", "title": "Tiny post", "by": "carol", "time": 1736935000, "score": 2},
    4: {"id": 4, "type": "story", "title": "Self post", "by": "dave", "time": 1736934900,
        "score": 40, "text": "<p>Hello &amp; welcome</p>"},
}


def _hn(handler, max_items: int = 10) -> HackerNewsSource:
    config = SourceConfig(
        id="hackernews",
        name="Hacker News",
        type="api",
        base_url="https://hn.example/v0",
        rate_limit=0,
        categories=[CategoryConfig(Category.TECHNOLOGY, "/topstories.json", max_items=max_items)],
    )
    return HackerNewsSource(config, transport=httpx.MockTransport(handler))


def _hn_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/v0/topstories.json":
        return httpx.Response(200, json=[1, 2, 3, 4, 5])
    story_id = int(path.rsplit("/", 1)[-1].removesuffix(".json"))
    if story_id not in STORIES:
        return httpx.Response(404)
    return httpx.Response(200, json=STORIES[story_id])


@pytest.mark.asyncio
async def test_hackernews_fetch() -> None:
    result = await _hn(_hn_handler).fetch_category(Category.TECHNOLOGY)

    assert result.success
    assert [i.title for i in result.items] == ["Postgres 18 released", "Self post"]
    first, second = result.items
    assert first.url == "https://pg.example"
    assert first.description == "250 points 80 comments by alice on Hacker News"
    assert first.published_at.timestamp() == 1736935200
    assert second.url == "https://news.ycombinator.com/item?id=4"
    assert second.description.endswith("- Hello & welcome...")
    assert [i.rank for i in result.items] == [1, 2]


@pytest.mark.asyncio
async def test_hackernews_list_failure() -> None:
    result = await _hn(lambda r: httpx.Response(500)).fetch_category(Category.TECHNOLOGY)

    assert not result.success
    assert "HTTP 500" in result.error


@pytest.mark.asyncio
async def test_hackernews_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await _hn(handler).fetch_category(Category.TECHNOLOGY)

    assert not result.success
    assert "ConnectError" in result.error


LISTING = {
    "data": {
        "children": [
            {"data": {"title": "Bitcoin hits new high", "url": "https://coin.example/high",
                      "permalink": "/r/crypto/1", "created_utc": 1736935200, "score": 500,
                      "num_comments": 120, "is_self": False, "subreddit": "CryptoCurrency",
                      "thumbnail": "https://img.example/btc.jpg"}},
            {"data": {"title": "Please upvote my post", "url": "https://x.example",
                      "permalink": "/r/crypto/2", "created_utc": 1736935100, "score": 50,
                      "is_self": False, "subreddit": "CryptoCurrency"}},
            {"data": {"title": "Daily discussion", "url": "https://reddit.com/r/crypto/3",
                      "permalink": "/r/crypto/3", "created_utc": 1736935000, "score": 30,
                      "is_self": True, "subreddit": "CryptoCurrency", "thumbnail": "self",
                      "selftext": "Talk here"}},
            {"data": {"title": "Low score", "url": "https://x.example/low",
                      "permalink": "/r/crypto/4", "created_utc": 1736934900, "score": 3,
                      "is_self": False, "subreddit": "CryptoCurrency"}},
        ]
    }
}


@pytest.mark.asyncio
async def test_reddit_fetch() -> None:
    seen_headers = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers["user-agent"] = request.headers["user-agent"]
        return httpx.Response(200, json=LISTING)

    config = SourceConfig(
        id="reddit",
        name="Reddit",
        type="api",
        base_url="https://reddit.example",
        rate_limit=0,
        headers={"User-Agent": "test-agent"},
        categories=[CategoryConfig(Category.CRYPTO, "/r/CryptoCurrency/hot.json")],
    )
    result = await RedditSource(config, transport=httpx.MockTransport(handler)).fetch_category(Category.CRYPTO)

    assert result.success
    assert seen_headers["user-agent"] == "test-agent"
    assert [i.title for i in result.items] == ["Bitcoin hits new high", "Daily discussion"]
    high, daily = result.items
    assert high.image_url == "https://img.example/btc.jpg"
    assert high.description == "500 upvotes 120 comments from r/CryptoCurrency"
    assert daily.url == "https://reddit.com/r/crypto/3"
    assert daily.image_url is None
    assert daily.description.endswith("- Talk here...")


@pytest.mark.asyncio
async def test_reddit_skips_broken_post_and_ranks_densely() -> None:
    listing = {"data": {"children": [
        {"data": {"title": "Markets rally", "url": "https://m.example/rally", "permalink": "/r/w/1",
                  "created_utc": 1736935200, "score": 300, "is_self": False, "subreddit": "worldnews"}},
        {"data": {"title": "Link went missing", "url": None, "permalink": "/r/w/2",
                  "created_utc": 1736935100, "score": 200, "is_self": False, "subreddit": "worldnews"}},
        {"data": {"title": "Too quiet", "url": "https://m.example/quiet", "permalink": "/r/w/3",
                  "created_utc": 1736935050, "score": 1, "is_self": False, "subreddit": "worldnews"}},
        {"data": {"title": "Ceasefire agreed", "url": "https://m.example/ceasefire", "permalink": "/r/w/4",
                  "created_utc": 1736935000, "score": 150, "is_self": False, "subreddit": "worldnews"}},
    ]}}
    config = SourceConfig(
        id="reddit",
        name="Reddit",
        type="api",
        base_url="https://reddit.example",
        rate_limit=0,
        categories=[CategoryConfig(Category.WORLD, "/r/worldnews/hot.json")],
    )
    transport = httpx.MockTransport(lambda r: httpx.Response(200, json=listing))

    result = await RedditSource(config, transport=transport).fetch_category(Category.WORLD)

    assert result.success
    assert [i.title for i in result.items] == ["Markets rally", "Ceasefire agreed"]
    assert [i.rank for i in result.items] == [1, 2]
