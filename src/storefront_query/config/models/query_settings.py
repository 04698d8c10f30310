"""Query cache configuration model.

This module contains the configuration for query caching behavior:
default staleness, retention of unobserved entries, and the retry policy.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from storefront_query.shared.constants import QueryDefaults


class QuerySettings(BaseModel):
    """Query cache configuration (all durations in seconds)."""

    stale_time: float = Field(
        default=QueryDefaults.STALE_TIME,
        ge=0,
        description="Default staleness window",
    )
    gc_time: float = Field(
        default=QueryDefaults.GC_TIME,
        ge=0,
        description="How long an entry without observers is retained",
    )
    retry_attempts: int = Field(
        default=QueryDefaults.RETRY_ATTEMPTS,
        ge=0,
        description="Number of retries after a failed fetch",
    )
    retry_delay: float = Field(
        default=QueryDefaults.RETRY_DELAY,
        ge=0,
        description="Base delay for exponential backoff",
    )
    retry_delay_max: float = Field(
        default=QueryDefaults.RETRY_DELAY_MAX,
        ge=0,
        description="Upper bound for a single retry delay",
    )

    @model_validator(mode="after")
    def _check_delays(self) -> QuerySettings:
        if self.retry_delay > self.retry_delay_max:
            msg = (
                f"retry_delay ({self.retry_delay}) must not exceed "
                f"retry_delay_max ({self.retry_delay_max})"
            )
            raise ValueError(msg)
        return self


__all__ = ["QuerySettings"]
