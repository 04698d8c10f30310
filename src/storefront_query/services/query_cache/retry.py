"""Retry policy for query fetches.

Failed fetches are retried with exponential backoff:
``delay = min(base_delay * 2**attempt, max_delay)``. Errors that a retry
cannot fix (client errors other than 429, service-reported failures) fail
immediately.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from storefront_query.config import QuerySettings
from storefront_query.shared.constants import HTTPStatusCodes, QueryDefaults
from storefront_query.shared.errors import ApiResponseError, ServiceReportedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff retry policy.

    Attributes:
        max_retries: Retries after the first attempt; 0 disables retrying
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for a single delay, in seconds
    """

    max_retries: int = QueryDefaults.RETRY_ATTEMPTS
    base_delay: float = QueryDefaults.RETRY_DELAY
    max_delay: float = QueryDefaults.RETRY_DELAY_MAX

    @classmethod
    def from_settings(cls, settings: QuerySettings) -> RetryPolicy:
        """Build a policy from query settings."""
        return cls(
            max_retries=settings.retry_attempts,
            base_delay=settings.retry_delay,
            max_delay=settings.retry_delay_max,
        )

    def delay_for(self, attempt: int) -> float:
        """Backoff delay before retry number ``attempt`` (0-based)."""
        return min(self.base_delay * (2**attempt), self.max_delay)

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Decide whether a failed attempt is retried.

        Args:
            error: Exception raised by the attempt
            attempt: 0-based number of the failed attempt

        Returns:
            True if another attempt should be made
        """
        if attempt >= self.max_retries:
            return False
        if isinstance(error, ServiceReportedError):
            return False
        if isinstance(error, ApiResponseError) and error.status_code is not None:
            if (
                HTTPStatusCodes.is_client_error(error.status_code)
                and error.status_code != HTTPStatusCodes.TOO_MANY_REQUESTS
            ):
                return False
        return True

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Call ``fn`` until it succeeds or the policy gives up.

        Cancellation is never retried.

        Raises:
            Exception: The error of the last attempt
        """
        attempt = 0
        while True:
            try:
                return await fn()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if not self.should_retry(e, attempt):
                    raise
                delay = self.delay_for(attempt)
                logger.debug(
                    "Attempt %d failed (%s), retrying in %.2fs",
                    attempt + 1,
                    e,
                    delay,
                )
                await asyncio.sleep(delay)
                attempt += 1


NO_RETRY = RetryPolicy(max_retries=0)


__all__ = ["NO_RETRY", "RetryPolicy"]
