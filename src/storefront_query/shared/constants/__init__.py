"""
Storefront Query Constants Module

This module provides centralized constants for storefront-query.
All magic values and configuration constants are defined here to ensure
consistency across the codebase.
"""

from .api import APIConfig, Endpoints, Pagination, ResourceDefaults
from .http_codes import ContentTypes, HTTPHeaders, HTTPStatusCodes
from .logging import LogConfig, LogOperationNames
from .query import GcTimes, QueryDefaults, QueryKinds, StaleTimes

__all__ = [
    "APIConfig",
    "ContentTypes",
    "Endpoints",
    "GcTimes",
    "HTTPHeaders",
    "HTTPStatusCodes",
    "LogConfig",
    "LogOperationNames",
    "Pagination",
    "QueryDefaults",
    "QueryKinds",
    "ResourceDefaults",
    "StaleTimes",
]
