"""Configuration domain models.

This module provides centralized access to all configuration models.
"""

from __future__ import annotations

from .api_settings import ApiSettings
from .logging_settings import LoggingSettings
from .query_settings import QuerySettings
from .settings import Settings

__all__ = [
    "ApiSettings",
    "LoggingSettings",
    "QuerySettings",
    "Settings",
]
