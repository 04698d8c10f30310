"""Resource query sets.

Typed accessors over the storefront's remote collections, each returning a
QueryObserver bound to the shared query cache.
"""

from __future__ import annotations

from .accounts import AccountQueries, is_valid_price_range
from .news import NewsQueries
from .params import AccountListParams, NewsListParams
from .query_keys import AccountKeys, CategoryKeys, NewsKeys, SystemKeys
from .storefront import StorefrontQueries
from .system import FooterData, HeaderData, PaymentInfo, SystemQueries, active_banners

__all__ = [
    "AccountKeys",
    "AccountListParams",
    "AccountQueries",
    "CategoryKeys",
    "FooterData",
    "HeaderData",
    "NewsKeys",
    "NewsListParams",
    "NewsQueries",
    "PaymentInfo",
    "StorefrontQueries",
    "SystemKeys",
    "SystemQueries",
    "active_banners",
    "is_valid_price_range",
]
