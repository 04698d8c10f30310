"""Reactive query handles.

A QueryObserver binds one query key and its fetcher to a QueryCache. It
fetches on first subscription when the data is missing or stale, forwards
every entry change to its listeners as a QueryResult, and cancels a fetch
nobody is waiting for anymore once the last listener leaves.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from storefront_query.services.query_cache.cache import QueryCache
from storefront_query.services.query_cache.entry import Fetcher, QueryState
from storefront_query.services.query_cache.state_machine import QueryStatus
from storefront_query.shared.cache_utils import QueryKey
from storefront_query.shared.constants import LogOperationNames

logger = logging.getLogger(__name__)

ResultListener = Callable[["QueryResult"], None]


@dataclass(frozen=True)
class QueryResult:
    """What a consumer sees of a query at one point in time.

    Attributes:
        status: Lifecycle status
        data: Last successful value, kept while a refresh runs
        error: Cause of the last failure
        updated_at: Cache clock time of the last success
        is_fetching: Whether a fetch is in flight
        is_stale: Whether the data is missing, invalidated or out of date
    """

    status: QueryStatus
    data: Any = None
    error: Exception | None = None
    updated_at: float | None = None
    is_fetching: bool = False
    is_stale: bool = True

    @classmethod
    def from_state(cls, state: QueryState | None, now: float) -> QueryResult:
        if state is None:
            return cls(status=QueryStatus.PENDING)
        return cls(
            status=state.status,
            data=state.data,
            error=state.error,
            updated_at=state.updated_at,
            is_fetching=state.is_fetching,
            is_stale=state.is_stale(now),
        )

    @property
    def is_pending(self) -> bool:
        return self.status is QueryStatus.PENDING

    @property
    def is_loading(self) -> bool:
        """First load: nothing to show yet and a fetch is running."""
        return self.is_pending and self.is_fetching and self.data is None

    @property
    def is_success(self) -> bool:
        return self.status is QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is QueryStatus.ERROR


class QueryObserver:
    """Reactive handle for one query.

    Args:
        cache: Shared query cache
        key: Query key
        fetcher: Coroutine function producing the data
        stale_time: Staleness window (cache default if None)
        gc_time: Retention once unobserved (cache default if None)
        enabled: A disabled observer never fetches
    """

    def __init__(
        self,
        cache: QueryCache,
        key: QueryKey,
        fetcher: Fetcher,
        *,
        stale_time: float | None = None,
        gc_time: float | None = None,
        enabled: bool = True,
    ) -> None:
        self.cache = cache
        self.key = key
        self.fetcher = fetcher
        self.stale_time = stale_time
        self.gc_time = gc_time
        self.enabled = enabled

        self._listeners: list[ResultListener] = []
        self._detach: Callable[[], None] | None = None

    def __repr__(self) -> str:
        return f"QueryObserver(key={self.key!r}, enabled={self.enabled})"

    @property
    def result(self) -> QueryResult:
        """Current snapshot of the query."""
        return QueryResult.from_state(self.cache.get_query_state(self.key), self.cache.now())

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def subscribe(self, listener: ResultListener) -> Callable[[], None]:
        """Register ``listener`` for every change of the query.

        The first listener attaches the observer to the cache and, when the
        query is enabled and its data missing or stale, starts a fetch. Must
        be called while the event loop is running.

        Returns:
            A callable removing the listener
        """
        self._listeners.append(listener)

        if self._detach is None:
            self._detach = self.cache.subscribe(
                self.key,
                self._on_change,
                stale_time=self.stale_time,
                gc_time=self.gc_time,
            )
            if self.enabled:
                self.cache.ensure_fetch(
                    self.key,
                    self.fetcher,
                    self.stale_time,
                    gc_time=self.gc_time,
                )

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
                if not self._listeners:
                    self._release()

        return unsubscribe

    def _release(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

        state = self.cache.get_query_state(self.key)
        if (
            state is not None
            and state.is_fetching
            and self.cache.observer_count(self.key) == 0
            and self.cache.waiter_count(self.key) == 0
        ):
            self.cache.cancel_queries(self.key, exact=True)

    def _on_change(self, state: QueryState) -> None:
        result = QueryResult.from_state(state, self.cache.now())
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                logger.exception(
                    "Listener of %r raised",
                    self.key,
                    extra={"operation": LogOperationNames.NOTIFY_LISTENER},
                )

    async def fetch(self) -> Any:
        """Return the query data, fetching if missing or stale.

        Returns:
            The data, or None for a disabled query (no request is made)

        Raises:
            Exception: The query error if the fetch failed
        """
        if not self.enabled:
            return None
        return await self.cache.fetch_query(
            self.key,
            self.fetcher,
            self.stale_time,
            gc_time=self.gc_time,
        )

    async def refetch(self) -> QueryResult:
        """Force a new fetch and return the resulting snapshot.

        Failures are reported in the returned result, not raised. A disabled
        query is not fetched.
        """
        if self.enabled:
            try:
                await self.cache.fetch_query(
                    self.key,
                    self.fetcher,
                    self.stale_time,
                    gc_time=self.gc_time,
                    force=True,
                )
            except Exception as e:
                logger.debug("Refetch of %r failed: %s", self.key, e)
        return self.result


__all__ = ["QueryObserver", "QueryResult", "ResultListener"]
