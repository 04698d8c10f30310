"""Storefront Query Configuration Module

This module provides unified access to configuration models and settings
management:
- Settings: Main configuration facade
- Loader functions: get_config, load_settings, reload_config, reset_config
- Domain models: API, query cache and logging settings
"""

from __future__ import annotations

from .loader import (
    configure_logging,
    get_config,
    load_settings,
    reload_config,
    reset_config,
)
from .models import ApiSettings, LoggingSettings, QuerySettings, Settings

__all__ = [
    "ApiSettings",
    "LoggingSettings",
    "QuerySettings",
    "Settings",
    "configure_logging",
    "get_config",
    "load_settings",
    "reload_config",
    "reset_config",
]
