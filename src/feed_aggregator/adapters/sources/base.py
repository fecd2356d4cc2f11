"""Shared plumbing for configured source adapters."""

from abc import abstractmethod
from datetime import timedelta
from typing import Optional

import httpx

from feed_aggregator.config import CategoryConfig, SourceConfig
from feed_aggregator.core import Category, ContentItem, RateLimiter, ScrapeResult, SourceAdapter
from feed_aggregator.logger import get_logger

USER_AGENT = "feed-aggregator/1.0"

logger = get_logger(__name__)


class ConfiguredSource(SourceAdapter):
    """Source adapter built from a ``SourceConfig``.

    Subclasses implement ``_fetch`` and may raise freely; ``fetch_category``
    applies the rate limit and turns every failure into a failed result.
    """

    def __init__(
        self,
        config: SourceConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self.config = config
        self.rate_limiter = RateLimiter(config.rate_limit)
        self.transport = transport
        self.timeout = timeout

    @property
    def source_id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    def supported_categories(self) -> list[Category]:
        return [c.category for c in self.config.categories]

    def refresh_interval(self, category: Category) -> timedelta:
        category_config = self.config.category_config(category)
        if category_config is None:
            return timedelta(0)
        return category_config.refresh_interval

    def client(self) -> httpx.AsyncClient:
        headers = {"User-Agent": USER_AGENT, **self.config.headers}
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=headers,
            transport=self.transport,
        )

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def create_item(self, title: str, url: str, category: Category, **kwargs) -> ContentItem:
        return ContentItem.create(title=title, url=url, category=category, source=self.name, **kwargs)

    async def fetch_category(self, category: Category) -> ScrapeResult:
        category_config = self.config.category_config(category)
        if category_config is None:
            return ScrapeResult.failed(
                f"Category {category.value} not supported", self.name, self.source_id, category
            )

        await self.rate_limiter.acquire()

        try:
            items = await self._fetch(category_config)
        except httpx.HTTPStatusError as e:
            error = f"HTTP {e.response.status_code} from {e.request.url}"
        except httpx.HTTPError as e:
            error = f"{type(e).__name__}: {e}"
        except Exception as e:
            logger.exception(f"Unexpected error fetching {self.source_id}/{category.value}")
            error = f"{type(e).__name__}: {e}"
        else:
            return ScrapeResult.ok(items[: category_config.max_items], self.name, self.source_id, category)

        logger.warning(f"Error fetching {self.source_id}/{category.value}: {error}")
        return ScrapeResult.failed(error, self.name, self.source_id, category)

    @abstractmethod
    async def _fetch(self, category_config: CategoryConfig) -> list[ContentItem]:
        """Fetch and parse items for one configured category."""
        pass
