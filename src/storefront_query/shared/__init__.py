"""Storefront Query Shared Module.

This package contains shared utilities, constants, and error handling used
across storefront-query.
"""

__all__ = ["cache_utils", "constants", "errors", "logging", "media"]
