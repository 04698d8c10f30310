"""
Query Cache Constants

Staleness windows, retention and retry defaults for the query cache.
All durations are in seconds.
"""

# Base time units
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE


class QueryDefaults:
    """Defaults applied to every query unless overridden."""

    STALE_TIME = 5 * BASE_MINUTE
    GC_TIME = 10 * BASE_MINUTE

    # Retry policy
    RETRY_ATTEMPTS = 3
    RETRY_DELAY = 1.0 * BASE_SECOND
    RETRY_DELAY_MAX = 30.0 * BASE_SECOND


class StaleTimes:
    """Staleness window per resource query."""

    NEWS_LIST = 5 * BASE_MINUTE
    NEWS_FEATURED = 10 * BASE_MINUTE
    NEWS_LATEST = 10 * BASE_MINUTE
    NEWS_DETAIL = 5 * BASE_MINUTE

    ACCOUNTS_LIST = 3 * BASE_MINUTE
    ACCOUNTS_FEATURED = 15 * BASE_MINUTE
    ACCOUNT_DETAIL = 5 * BASE_MINUTE
    ACCOUNTS_PRICE_RANGE = 5 * BASE_MINUTE
    CATEGORIES = BASE_HOUR

    SYSTEM = QueryDefaults.STALE_TIME


class GcTimes:
    """Retention overrides (time an unobserved entry is kept)."""

    CATEGORIES = 2 * BASE_HOUR


class QueryKinds:
    """Resource kinds used as the first element of query keys."""

    NEWS = "news"
    ACCOUNTS = "accounts"
    CATEGORIES = "categories"
    PUBLIC = "public"

    FEATURED = "featured"
    LATEST = "latest"
    DETAIL = "detail"
    PRICE_RANGE = "price-range"
