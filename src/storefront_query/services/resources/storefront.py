"""Storefront query facade.

StorefrontQueries wires one resource client and one query cache into the
news, account and system query sets. Applications create a single instance
at startup and close it at shutdown.
"""

from __future__ import annotations

import logging
from types import TracebackType

from storefront_query.config import Settings, get_config
from storefront_query.services.api_client import StorefrontApiClient
from storefront_query.services.query_cache import QueryCache
from storefront_query.services.resources.accounts import AccountQueries
from storefront_query.services.resources.news import NewsQueries
from storefront_query.services.resources.system import SystemQueries
from storefront_query.shared.media import get_image_url, get_optimized_image_url

logger = logging.getLogger(__name__)


class StorefrontQueries:
    """All storefront query sets sharing one client and one cache.

    Args:
        client: Resource service client
        cache: Shared query cache

    Example:
        >>> async with StorefrontQueries.from_settings() as queries:
        ...     envelope = await queries.news.get_latest(5).fetch()
    """

    def __init__(self, client: StorefrontApiClient, cache: QueryCache) -> None:
        self.client = client
        self.cache = cache
        self.news = NewsQueries(client, cache)
        self.accounts = AccountQueries(client, cache)
        self.system = SystemQueries(client, cache)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> StorefrontQueries:
        """Build client and cache from settings (global configuration if None)."""
        settings = settings or get_config()
        logger.debug("Creating storefront queries for %s", settings.api.base_url)
        return cls(
            StorefrontApiClient(settings.api),
            QueryCache.from_settings(settings.query),
        )

    async def __aenter__(self) -> StorefrontQueries:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the cache, then the HTTP client."""
        await self.cache.close()
        await self.client.close()

    def image_url(self, image_url: str | None) -> str:
        """Resolve an image path from a payload against the backend origin."""
        return get_image_url(image_url, self.client.settings.base_url)

    def optimized_image_url(
        self,
        image_url: str | None,
        width: int | None = None,
        height: int | None = None,
        quality: int = 80,
    ) -> str:
        """Resolve an image path and append width, height and quality hints."""
        return get_optimized_image_url(
            image_url,
            self.client.settings.base_url,
            width=width,
            height=height,
            quality=quality,
        )


__all__ = ["StorefrontQueries"]
