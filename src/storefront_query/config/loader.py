"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Thread-safe singleton pattern for the Settings instance

Nothing in the query layer requires the singleton: every component accepts
an explicit Settings (or its parts) so tests can build isolated instances.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import toml
from dotenv import load_dotenv
from pydantic import ValidationError

from storefront_query.config.models.settings import Settings
from storefront_query.shared.constants import LogOperationNames
from storefront_query.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    create_config_error,
)
from storefront_query.shared.logging import setup_structured_logger

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/config.toml"),
    Path("config.toml"),
)


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking pattern to ensure thread-safety
    while minimizing lock overhead.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it if necessary."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self) -> Settings:
        """Reload the global settings instance from configuration sources."""
        with self._lock:
            self._instance = load_settings()

        return self._instance

    def reset(self) -> None:
        """Forget the cached instance (used by tests)."""
        with self._lock:
            self._instance = None


def _load_env_file(env_file: Path = Path(".env")) -> None:
    """Load environment variables from a .env file when one exists.

    Variables already present in the environment win.
    """
    if env_file.exists():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment from %s", env_file)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. If None, the default
            locations are tried before falling back to environment variables.

    Returns:
        Settings instance

    Raises:
        ApplicationError: If the configuration fails validation or the TOML
            file cannot be parsed
        FileNotFoundError: If an explicit config_path does not exist
    """
    _load_env_file()

    source = config_path
    if not source:
        source = next((path for path in DEFAULT_CONFIG_PATHS if path.exists()), None)

    try:
        if source:
            logger.debug("Loading configuration from %s", source)
            return Settings.from_toml_file(source)

        return Settings()

    except toml.TomlDecodeError as e:
        raise create_config_error(
            f"Configuration file is not valid TOML: {e}",
            config_key=str(source),
            operation=LogOperationNames.LOAD_SETTINGS,
            original_error=e,
        ) from e

    except ValidationError as e:
        raise ApplicationError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Invalid configuration: {e.error_count()} validation error(s)",
            context=ErrorContext(
                operation=LogOperationNames.LOAD_SETTINGS,
                additional_data={"config_path": str(source or "")},
            ),
            original_error=e,
        ) from e


# Global loader instance
_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Reload the global settings instance from configuration sources."""
    return _loader.reload_config()


def reset_config() -> None:
    """Drop the cached global settings instance."""
    _loader.reset()


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Configure the package logger from the logging section of the settings.

    Args:
        settings: Settings to apply (global configuration if None)

    Returns:
        The configured package logger
    """
    logging_settings = (settings or get_config()).logging
    return setup_structured_logger(
        level=logging_settings.level,
        log_file=logging_settings.file,
        use_rich_console=logging_settings.use_rich,
        console_output=logging_settings.console_output,
    )


__all__ = [
    "SettingsLoader",
    "configure_logging",
    "get_config",
    "load_settings",
    "reload_config",
    "reset_config",
]
