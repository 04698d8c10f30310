"""
Logging Configuration Constants

This module contains all constants related to logging configuration
and log formatting.
"""


class LogConfig:
    """Log configuration constants."""

    DEFAULT_LEVEL = "INFO"
    DEFAULT_ENCODING = "utf-8"
    ROOT_LOGGER_NAME = "storefront_query"
    RICH_TIME_FORMAT = "[%H:%M:%S]"


class LogOperationNames:
    """Operation names used in structured log records."""

    FETCH_QUERY = "fetch_query"
    API_GET = "api_get"
    NOTIFY_LISTENER = "notify_listener"
    LOAD_SETTINGS = "load_settings"
