"""
storefront-query - Cached data fetching for the game account storefront

Typed, cached and de-duplicated asynchronous queries over the storefront's
resource service (news, game accounts, public system data).
"""

__version__ = "0.1.0"

from .config import Settings, get_config
from .services import (
    NewsQueries,
    QueryCache,
    QueryObserver,
    QueryResult,
    QueryStatus,
    StorefrontApiClient,
    StorefrontQueries,
)

__all__ = [
    "NewsQueries",
    "QueryCache",
    "QueryObserver",
    "QueryResult",
    "QueryStatus",
    "Settings",
    "StorefrontApiClient",
    "StorefrontQueries",
    "__version__",
    "get_config",
]
