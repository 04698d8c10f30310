"""Services module for storefront-query.

This module contains the resource service client, the query cache and the
resource query sets built on them.
"""

from .api_client import StorefrontApiClient
from .api_models import ApiEnvelope, ApiPagination
from .query_cache import QueryCache, QueryObserver, QueryResult, QueryStatus, RetryPolicy
from .resources import AccountQueries, NewsQueries, StorefrontQueries, SystemQueries

__all__ = [
    "AccountQueries",
    "ApiEnvelope",
    "ApiPagination",
    "NewsQueries",
    "QueryCache",
    "QueryObserver",
    "QueryResult",
    "QueryStatus",
    "RetryPolicy",
    "StorefrontApiClient",
    "StorefrontQueries",
    "SystemQueries",
]
