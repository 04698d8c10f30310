"""Query cache entry models.

This module defines the mutable per-key record held by the query cache and
the immutable snapshot handed to observers.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from storefront_query.services.query_cache.state_machine import (
    QueryStateMachine,
    QueryStatus,
)
from storefront_query.shared.cache_utils import QueryKey

Fetcher = Callable[[], Awaitable[Any]]

__all__ = ["Fetcher", "QueryEntry", "QueryState"]


@dataclass(frozen=True)
class QueryState:
    """Immutable snapshot of a cache entry.

    Attributes:
        status: Lifecycle status
        data: Last successfully fetched value (kept while refreshing)
        error: Exception of the last failed fetch, cleared when a new fetch starts
        updated_at: Clock time of the last success (None if never succeeded)
        error_updated_at: Clock time of the last failure
        is_fetching: Whether a fetch is in flight
        is_invalidated: Whether the entry was explicitly marked stale
        stale_at: Clock time at which the data becomes stale
    """

    status: QueryStatus
    data: Any = None
    error: Exception | None = None
    updated_at: float | None = None
    error_updated_at: float | None = None
    is_fetching: bool = False
    is_invalidated: bool = False
    stale_at: float | None = None

    def is_stale(self, now: float) -> bool:
        """Check whether the snapshot is stale at clock time ``now``."""
        if self.is_invalidated or self.stale_at is None:
            return True
        return now >= self.stale_at


class QueryEntry:
    """Mutable record for one query key.

    Only the query cache mutates entries. ``task`` always belongs to the most
    recently issued fetch (sequence number ``seq``); older fetches that are
    still running are tracked in ``tasks`` until they finish.
    """

    def __init__(
        self,
        key: QueryKey,
        key_hash: str,
        stale_time: float,
        gc_time: float,
    ) -> None:
        self.key = key
        self.key_hash = key_hash
        self.stale_time = stale_time
        self.gc_time = gc_time

        self.machine = QueryStateMachine()
        self.data: Any = None
        self.error: Exception | None = None
        self.updated_at: float | None = None
        self.error_updated_at: float | None = None
        self.invalidated = False

        self.fetcher: Fetcher | None = None
        self.task: asyncio.Task[Any] | None = None
        self.tasks: set[asyncio.Task[Any]] = set()
        self.seq = 0
        # Callers currently awaiting the fetch through fetch_query()
        self.waiters = 0

        # Status and error to put back if the running fetch is cancelled
        self.saved_status: QueryStatus | None = None
        self.saved_error: Exception | None = None

        self.inactive_since: float | None = None
        self.gc_handle: asyncio.TimerHandle | None = None

    @property
    def status(self) -> QueryStatus:
        return self.machine.state

    @property
    def is_fetching(self) -> bool:
        return self.task is not None

    @property
    def stale_at(self) -> float | None:
        if self.updated_at is None:
            return None
        return self.updated_at + self.stale_time

    def is_stale(self, now: float) -> bool:
        """Check whether the data is missing, invalidated or older than stale_time."""
        stale_at = self.stale_at
        if self.invalidated or stale_at is None:
            return True
        return now >= stale_at

    def is_fresh(self, now: float) -> bool:
        """Check whether the entry can be served without fetching."""
        return self.status is QueryStatus.SUCCESS and not self.is_stale(now)

    def begin_fetch(self) -> int:
        """Record the start of a new fetch and return its sequence number.

        The pre-fetch status is saved only for the first of overlapping fetches.
        """
        if self.task is None:
            self.saved_status = self.status
            self.saved_error = self.error
        self.machine.transition(QueryStatus.PENDING)
        self.error = None
        self.seq += 1
        return self.seq

    def succeed(self, data: Any, now: float) -> None:
        self.machine.transition(QueryStatus.SUCCESS)
        self.data = data
        self.error = None
        self.updated_at = now
        self.invalidated = False
        self._end_fetch()

    def fail(self, error: Exception, now: float) -> None:
        self.machine.transition(QueryStatus.ERROR)
        self.error = error
        self.error_updated_at = now
        self._end_fetch()

    def restore(self) -> None:
        """Return to the state saved before the cancelled fetch started."""
        if self.saved_status is not None:
            self.machine.restore(self.saved_status)
            self.error = self.saved_error
        self._end_fetch()

    def abandon(self) -> None:
        """Restore the pre-fetch state and detach every running fetch.

        Fetches still running after this call find their sequence number
        outdated and leave the entry untouched.
        """
        self.restore()
        self.seq += 1

    def overwrite(self, data: Any, now: float) -> None:
        """Store data supplied directly instead of fetched.

        Any running fetch is detached first. The overwrite is recorded as a
        completed fetch, so a settled entry passes through PENDING.
        """
        if self.task is not None:
            self.seq += 1
            self._end_fetch()
        if self.status is not QueryStatus.PENDING:
            self.machine.transition(QueryStatus.PENDING)
        self.succeed(data, now)

    def _end_fetch(self) -> None:
        self.task = None
        self.saved_status = None
        self.saved_error = None

    def snapshot(self) -> QueryState:
        return QueryState(
            status=self.status,
            data=self.data,
            error=self.error,
            updated_at=self.updated_at,
            error_updated_at=self.error_updated_at,
            is_fetching=self.is_fetching,
            is_invalidated=self.invalidated,
            stale_at=self.stale_at,
        )
