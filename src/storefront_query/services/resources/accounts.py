"""Game account and category queries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from storefront_query.services.query_cache import QueryObserver
from storefront_query.services.resources.base import ResourceQueries, check_limit, detail_path
from storefront_query.services.resources.params import AccountListParams
from storefront_query.services.resources.query_keys import AccountKeys, CategoryKeys
from storefront_query.shared.constants import (
    Endpoints,
    GcTimes,
    ResourceDefaults,
    StaleTimes,
)


def is_valid_price_range(min_price: int, max_price: int) -> bool:
    """Check the bounds accepted by the price range query.

    Example:
        >>> is_valid_price_range(0, 500_000)
        True
        >>> is_valid_price_range(500_000, 500_000)
        False
    """
    return 0 <= min_price < max_price <= ResourceDefaults.MAX_PRICE


class AccountQueries(ResourceQueries):
    """Cached queries over game accounts and their categories."""

    def get_list(
        self,
        params: AccountListParams | Mapping[str, Any] | None = None,
    ) -> QueryObserver:
        """Filtered account list (fresh for 3 minutes).

        Raises:
            DomainError: If params do not validate
        """
        list_params = AccountListParams.coerce(params)
        return self._observe(
            AccountKeys.list(list_params),
            Endpoints.ACCOUNTS,
            list_params.to_query_params(),
            stale_time=StaleTimes.ACCOUNTS_LIST,
        )

    def get_featured(
        self,
        limit: int = ResourceDefaults.ACCOUNTS_FEATURED_LIMIT,
    ) -> QueryObserver:
        """Featured accounts (fresh for 15 minutes)."""
        check_limit(limit, "accounts.get_featured")
        return self._observe(
            AccountKeys.featured(limit),
            Endpoints.ACCOUNTS_FEATURED,
            {"limit": limit},
            stale_time=StaleTimes.ACCOUNTS_FEATURED,
        )

    def get_by_id(self, account_id: str | None) -> QueryObserver:
        """One account (fresh for 5 minutes); disabled for an empty id."""
        return self._observe(
            AccountKeys.detail(account_id),
            detail_path(Endpoints.ACCOUNT_DETAIL, account_id=account_id or ""),
            stale_time=StaleTimes.ACCOUNT_DETAIL,
            enabled=bool(account_id),
        )

    def get_categories(self) -> QueryObserver:
        """Account categories (fresh for 1 hour, kept 2 hours unobserved)."""
        return self._observe(
            CategoryKeys.ALL,
            Endpoints.CATEGORIES,
            stale_time=StaleTimes.CATEGORIES,
            gc_time=GcTimes.CATEGORIES,
        )

    def get_by_price_range(
        self,
        min_price: int,
        max_price: int,
        limit: int = ResourceDefaults.ACCOUNTS_PRICE_RANGE_LIMIT,
    ) -> QueryObserver:
        """Accounts priced between min_price and max_price (fresh for 5 minutes).

        The query is disabled unless ``0 <= min_price < max_price <= 1e9``.
        """
        check_limit(limit, "accounts.get_by_price_range")
        return self._observe(
            AccountKeys.price_range(min_price, max_price, limit),
            Endpoints.ACCOUNTS_PRICE_RANGE,
            {"minPrice": min_price, "maxPrice": max_price, "limit": limit},
            stale_time=StaleTimes.ACCOUNTS_PRICE_RANGE,
            enabled=is_valid_price_range(min_price, max_price),
        )


__all__ = ["AccountQueries", "is_valid_price_range"]
