"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from storefront_query.shared.constants import LogConfig

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration.

    This class manages logging behavior including level, file output
    and console output settings.
    """

    level: str = Field(default=LogConfig.DEFAULT_LEVEL, description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON log file path")
    console_output: bool = Field(default=True, description="Enable console logging")
    use_rich: bool = Field(default=True, description="Use Rich for console output")

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _VALID_LEVELS:
            msg = f"level must be one of {', '.join(_VALID_LEVELS)}, got: {value!r}"
            raise ValueError(msg)
        return level


__all__ = ["LoggingSettings"]
