"""Shared plumbing for resource query sets."""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from storefront_query.services.api_client import StorefrontApiClient
from storefront_query.services.query_cache import QueryCache, QueryObserver
from storefront_query.shared.cache_utils import QueryKey
from storefront_query.shared.errors import create_validation_error


class ResourceQueries:
    """Base class binding a resource client to the shared query cache.

    Args:
        client: Resource service client
        cache: Shared query cache
    """

    def __init__(self, client: StorefrontApiClient, cache: QueryCache) -> None:
        self.client = client
        self.cache = cache

    def _observe(
        self,
        key: QueryKey,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        stale_time: float | None = None,
        gc_time: float | None = None,
        enabled: bool = True,
    ) -> QueryObserver:
        fetcher = functools.partial(self.client.get, path, dict(params) if params else None)
        return QueryObserver(
            self.cache,
            key,
            fetcher,
            stale_time=stale_time,
            gc_time=gc_time,
            enabled=enabled,
        )


def detail_path(template: str, **ids: str) -> str:
    """Fill an endpoint template with URL-quoted identifiers.

    Example:
        >>> detail_path("/news/{news_id}", news_id="a/b")
        '/news/a%2Fb'
    """
    return template.format(**{name: quote(str(value), safe="") for name, value in ids.items()})


def check_limit(limit: int, operation: str) -> int:
    """Reject non-positive limits before they reach a query key."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise create_validation_error(
            f"limit must be a positive integer, got: {limit!r}",
            field="limit",
            operation=operation,
        )
    return limit


__all__ = ["ResourceQueries", "check_limit", "detail_path"]
