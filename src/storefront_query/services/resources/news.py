"""News queries.

Each accessor returns a QueryObserver over the shared cache:

    >>> featured = queries.news.get_featured()
    >>> envelope = await featured.fetch()
    >>> envelope.data
    [{'_id': '...', 'title': '...'}, ...]

The cached value is the service envelope; its ``data`` is the payload as
the service sent it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from storefront_query.services.query_cache import QueryObserver
from storefront_query.services.resources.base import ResourceQueries, check_limit, detail_path
from storefront_query.services.resources.params import NewsListParams
from storefront_query.services.resources.query_keys import NewsKeys
from storefront_query.shared.constants import Endpoints, ResourceDefaults, StaleTimes


class NewsQueries(ResourceQueries):
    """Cached queries over the news collection."""

    def get_list(
        self,
        params: NewsListParams | Mapping[str, Any] | None = None,
    ) -> QueryObserver:
        """Paginated news list (fresh for 5 minutes).

        Args:
            params: Page, limit and search; defaults to the first page

        Raises:
            DomainError: If params do not validate
        """
        list_params = NewsListParams.coerce(params)
        return self._observe(
            NewsKeys.list(list_params),
            Endpoints.NEWS,
            list_params.to_query_params(),
            stale_time=StaleTimes.NEWS_LIST,
        )

    def get_featured(self, limit: int = ResourceDefaults.NEWS_FEATURED_LIMIT) -> QueryObserver:
        """Featured news (fresh for 10 minutes)."""
        check_limit(limit, "news.get_featured")
        return self._observe(
            NewsKeys.featured(limit),
            Endpoints.NEWS_FEATURED,
            {"limit": limit},
            stale_time=StaleTimes.NEWS_FEATURED,
        )

    def get_latest(self, limit: int = ResourceDefaults.NEWS_LATEST_LIMIT) -> QueryObserver:
        """Most recent news (fresh for 10 minutes)."""
        check_limit(limit, "news.get_latest")
        return self._observe(
            NewsKeys.latest(limit),
            Endpoints.NEWS_LATEST,
            {"limit": limit},
            stale_time=StaleTimes.NEWS_LATEST,
        )

    def get_by_id(self, news_id: str | None) -> QueryObserver:
        """One news item (fresh for 5 minutes).

        An empty or missing id yields a disabled query that never fetches.
        """
        return self._observe(
            NewsKeys.detail(news_id),
            detail_path(Endpoints.NEWS_DETAIL, news_id=news_id or ""),
            stale_time=StaleTimes.NEWS_DETAIL,
            enabled=bool(news_id),
        )


__all__ = ["NewsQueries"]
