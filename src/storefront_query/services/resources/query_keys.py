"""Query key factory.

Keys start with the resource kind so that a whole resource can be
invalidated with a one-element prefix, e.g. ``NewsKeys.ALL``.
"""

from __future__ import annotations

from storefront_query.services.resources.params import AccountListParams, NewsListParams
from storefront_query.shared.cache_utils import QueryKey
from storefront_query.shared.constants import QueryKinds


class NewsKeys:
    """Keys of news queries."""

    ALL: QueryKey = (QueryKinds.NEWS,)

    @staticmethod
    def list(params: NewsListParams) -> QueryKey:
        return (QueryKinds.NEWS, params)

    @staticmethod
    def featured(limit: int) -> QueryKey:
        return (QueryKinds.NEWS, QueryKinds.FEATURED, limit)

    @staticmethod
    def latest(limit: int) -> QueryKey:
        return (QueryKinds.NEWS, QueryKinds.LATEST, limit)

    @staticmethod
    def detail(news_id: str | None) -> QueryKey:
        return (QueryKinds.NEWS, QueryKinds.DETAIL, news_id)


class AccountKeys:
    """Keys of game account queries."""

    ALL: QueryKey = (QueryKinds.ACCOUNTS,)

    @staticmethod
    def list(params: AccountListParams) -> QueryKey:
        return (QueryKinds.ACCOUNTS, params)

    @staticmethod
    def featured(limit: int) -> QueryKey:
        return (QueryKinds.ACCOUNTS, QueryKinds.FEATURED, limit)

    @staticmethod
    def detail(account_id: str | None) -> QueryKey:
        return (QueryKinds.ACCOUNTS, QueryKinds.DETAIL, account_id)

    @staticmethod
    def price_range(min_price: int, max_price: int, limit: int) -> QueryKey:
        return (QueryKinds.ACCOUNTS, QueryKinds.PRICE_RANGE, min_price, max_price, limit)


class CategoryKeys:
    ALL: QueryKey = (QueryKinds.CATEGORIES,)


class SystemKeys:
    """Keys of public system data."""

    ALL: QueryKey = (QueryKinds.PUBLIC,)
    SETTINGS: QueryKey = (QueryKinds.PUBLIC, "settings")
    LOGO: QueryKey = (QueryKinds.PUBLIC, "logo")
    BANNERS: QueryKey = (QueryKinds.PUBLIC, "banners")


__all__ = ["AccountKeys", "CategoryKeys", "NewsKeys", "SystemKeys"]
