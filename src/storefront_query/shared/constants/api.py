"""
API Configuration Constants

This module contains all constants related to the storefront resource
service: endpoints, defaults and limits.
"""

from .query import BASE_SECOND


class APIConfig:
    """Base API configuration constants."""

    DEFAULT_BASE_URL = "http://localhost:5002/api"
    DEFAULT_REQUEST_TIMEOUT = 10 * BASE_SECOND
    API_PATH_SUFFIX = "/api"

    # Request headers
    BEARER_PREFIX = "Bearer "


class Endpoints:
    """Resource service endpoint paths (relative to the API base URL)."""

    NEWS = "/news"
    NEWS_FEATURED = "/news/featured"
    NEWS_LATEST = "/news/latest"
    NEWS_DETAIL = "/news/{news_id}"

    ACCOUNTS = "/accounts"
    ACCOUNTS_FEATURED = "/accounts/featured"
    ACCOUNTS_PRICE_RANGE = "/accounts/price-range"
    ACCOUNT_DETAIL = "/accounts/{account_id}"
    CATEGORIES = "/categories"

    SYSTEM_PUBLIC_SETTINGS = "/system/settings/public"
    SYSTEM_LOGO = "/system/logo"
    SYSTEM_BANNERS = "/system/banners"


class Pagination:
    """Default pagination values."""

    DEFAULT_PAGE = 1
    DEFAULT_PAGE_SIZE = 12
    MAX_PAGE_SIZE = 100


class ResourceDefaults:
    """Default sizes for curated subsets."""

    NEWS_FEATURED_LIMIT = 5
    NEWS_LATEST_LIMIT = 5
    ACCOUNTS_FEATURED_LIMIT = 8
    ACCOUNTS_PRICE_RANGE_LIMIT = 12

    # Upper bound accepted for price range queries (VND)
    MAX_PRICE = 1_000_000_000
