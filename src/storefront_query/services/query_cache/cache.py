"""Asynchronous query cache.

This module provides the cache store every query in the package goes
through. For each query key it keeps one entry and guarantees:

- at most one in-flight fetch per key (concurrent callers share it)
- data younger than the entry's staleness window is served without fetching
- responses are applied in issue order: only the most recently issued fetch
  may update the entry, and callers awaiting an older fetch receive the
  newest result
- a cancelled fetch restores the entry to its pre-fetch state quietly
- entries without observers are dropped ``gc_time`` seconds after they
  became inactive

The cache is created once per application and shared by every observer.
It must only be used from the thread running its event loop.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from storefront_query.config import QuerySettings
from storefront_query.services.query_cache.entry import Fetcher, QueryEntry, QueryState
from storefront_query.services.query_cache.retry import RetryPolicy
from storefront_query.shared.cache_utils import (
    QueryKey,
    key_hash,
    key_matches_prefix,
    normalize_key,
)
from storefront_query.shared.constants import LogOperationNames, QueryDefaults
from storefront_query.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    StorefrontError,
)
from storefront_query.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

logger = logging.getLogger(__name__)

Listener = Callable[[QueryState], None]


class QueryCache:
    """Shared store of query entries.

    Args:
        retry_policy: Policy applied to failed fetches (default: 3 retries)
        stale_time: Staleness window for queries that do not set one
        gc_time: Retention of entries without observers
        clock: Monotonic clock in seconds, injectable for tests

    Example:
        >>> cache = QueryCache()
        >>> data = await cache.fetch_query(("news", "detail", "42"), fetch_news, 300)
        >>> await cache.close()
    """

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        *,
        stale_time: float = QueryDefaults.STALE_TIME,
        gc_time: float = QueryDefaults.GC_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.retry_policy = retry_policy or RetryPolicy()
        self.stale_time = stale_time
        self.gc_time = gc_time
        self._clock = clock

        self._entries: dict[str, QueryEntry] = {}
        self._listeners: dict[str, list[Listener]] = {}
        self._closed = False

        self._hits = 0
        self._joins = 0
        self._fetches = 0
        self._superseded = 0

    @classmethod
    def from_settings(
        cls,
        settings: QuerySettings,
        clock: Callable[[], float] = time.monotonic,
    ) -> QueryCache:
        """Build a cache from query settings."""
        return cls(
            RetryPolicy.from_settings(settings),
            stale_time=settings.stale_time,
            gc_time=settings.gc_time,
            clock=clock,
        )

    def now(self) -> float:
        """Current time on the cache clock."""
        return self._clock()

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ApplicationError(
                ErrorCode.QUERY_CACHE_CLOSED,
                "Query cache has been closed",
                ErrorContext(operation=LogOperationNames.FETCH_QUERY),
            )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _get_entry(self, key: QueryKey) -> QueryEntry | None:
        return self._entries.get(key_hash(key))

    def _get_or_create(
        self,
        key: QueryKey,
        stale_time: float | None = None,
        gc_time: float | None = None,
    ) -> QueryEntry:
        digest = key_hash(key)
        entry = self._entries.get(digest)
        if entry is None:
            entry = QueryEntry(
                tuple(key),
                digest,
                stale_time=self.stale_time if stale_time is None else stale_time,
                gc_time=self.gc_time if gc_time is None else gc_time,
            )
            self._entries[digest] = entry
            self._schedule_gc(entry)
        else:
            if stale_time is not None:
                entry.stale_time = stale_time
            if gc_time is not None:
                entry.gc_time = gc_time
        return entry

    def _match(self, prefix: Sequence[Any] | None, exact: bool = False) -> list[QueryEntry]:
        if prefix is None:
            return list(self._entries.values())
        if exact:
            entry = self._get_entry(prefix)
            return [entry] if entry is not None else []
        normalize_key(prefix)
        return [
            entry
            for entry in self._entries.values()
            if key_matches_prefix(entry.key, prefix)
        ]

    def _has_observers(self, entry: QueryEntry) -> bool:
        return bool(self._listeners.get(entry.key_hash))

    def observer_count(self, key: QueryKey) -> int:
        """Number of listeners subscribed to ``key``."""
        return len(self._listeners.get(key_hash(key), ()))

    def waiter_count(self, key: QueryKey) -> int:
        """Number of callers awaiting a fetch of ``key`` in fetch_query()."""
        entry = self._get_entry(key)
        return entry.waiters if entry is not None else 0

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self,
        key: QueryKey,
        listener: Listener,
        *,
        stale_time: float | None = None,
        gc_time: float | None = None,
    ) -> Callable[[], None]:
        """Register a listener notified with a snapshot on every change of ``key``.

        Returns:
            A callable that removes the listener. Calling it twice is harmless.
        """
        self._check_open()
        entry = self._get_or_create(key, stale_time, gc_time)
        self._listeners.setdefault(entry.key_hash, []).append(listener)
        self._cancel_gc(entry)

        def unsubscribe() -> None:
            listeners = self._listeners.get(entry.key_hash)
            if not listeners or listener not in listeners:
                return
            listeners.remove(listener)
            if not listeners:
                del self._listeners[entry.key_hash]
                current = self._entries.get(entry.key_hash)
                if current is not None:
                    self._schedule_gc(current)

        return unsubscribe

    def _notify(self, entry: QueryEntry) -> None:
        listeners = self._listeners.get(entry.key_hash)
        if not listeners:
            return
        snapshot = entry.snapshot()
        for listener in list(listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(
                    "Query listener raised for %r",
                    entry.key,
                    extra={"operation": LogOperationNames.NOTIFY_LISTENER},
                )

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def ensure_fetch(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        stale_time: float | None = None,
        *,
        gc_time: float | None = None,
        force: bool = False,
    ) -> asyncio.Task[Any] | None:
        """Start a fetch for ``key`` unless its data is fresh.

        Must be called while the event loop is running.

        Args:
            key: Query key
            fetcher: Coroutine function producing the data
            stale_time: Staleness window for this key
            gc_time: Retention for this key
            force: Fetch even when fresh, superseding any fetch in flight

        Returns:
            The in-flight task, or None when the cached data is fresh
        """
        self._check_open()
        entry = self._get_or_create(key, stale_time, gc_time)
        return self._ensure(entry, fetcher, force=force)

    def _ensure(
        self,
        entry: QueryEntry,
        fetcher: Fetcher,
        *,
        force: bool,
    ) -> asyncio.Task[Any] | None:
        if not force:
            if entry.task is not None:
                self._joins += 1
                logger.debug("Joining in-flight fetch for %r", entry.key)
                return entry.task
            if entry.is_fresh(self.now()):
                self._hits += 1
                logger.debug("Cache hit for %r", entry.key)
                return None
        return self._start_fetch(entry, fetcher)

    async def fetch_query(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        stale_time: float | None = None,
        *,
        gc_time: float | None = None,
        force: bool = False,
    ) -> Any:
        """Return the data for ``key``, fetching it if needed.

        If the fetch is cancelled, the data the entry held before the fetch
        is returned.

        Raises:
            Exception: Whatever the fetcher raised after retries were exhausted
        """
        self._check_open()
        entry = self._get_or_create(key, stale_time, gc_time)
        task = self._ensure(entry, fetcher, force=force)
        if task is None:
            return entry.data
        entry.waiters += 1
        try:
            return await self._await_task(entry, task)
        finally:
            entry.waiters -= 1

    async def _await_task(self, entry: QueryEntry, task: asyncio.Task[Any]) -> Any:
        # Shielded so that one caller giving up does not cancel the shared fetch
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if task.cancelled() and (current is None or not current.cancelling()):
                return entry.data
            raise

    def _start_fetch(self, entry: QueryEntry, fetcher: Fetcher) -> asyncio.Task[Any]:
        seq = entry.begin_fetch()
        entry.fetcher = fetcher
        self._cancel_gc(entry)

        task = asyncio.get_running_loop().create_task(
            self._run_fetch(entry, seq, fetcher),
            name=f"query:{entry.key[0]}:{seq}",
        )
        entry.task = task
        entry.tasks.add(task)
        task.add_done_callback(functools.partial(self._on_task_done, entry))

        self._fetches += 1
        log_operation_start(
            logger,
            LogOperationNames.FETCH_QUERY,
            context={"query_key": repr(entry.key), "seq": seq},
        )
        self._notify(entry)
        return task

    async def _run_fetch(self, entry: QueryEntry, seq: int, fetcher: Fetcher) -> Any:
        start = time.perf_counter()
        try:
            data = await self.retry_policy.run(fetcher)
        except asyncio.CancelledError:
            logger.debug("Fetch for %r cancelled (seq=%d)", entry.key, seq)
            if seq == entry.seq:
                entry.restore()
                self._notify(entry)
                self._schedule_gc(entry)
            raise
        except Exception as e:
            if seq != entry.seq:
                self._superseded += 1
                logger.debug("Discarding superseded failure for %r (seq=%d)", entry.key, seq)
                return await self._follow(entry)
            entry.fail(e, self.now())
            self._log_failure(entry, e)
            self._notify(entry)
            self._schedule_gc(entry)
            raise

        if seq != entry.seq:
            self._superseded += 1
            logger.debug("Discarding superseded response for %r (seq=%d)", entry.key, seq)
            return await self._follow(entry)

        entry.succeed(data, self.now())
        log_operation_success(
            logger,
            operation=LogOperationNames.FETCH_QUERY,
            duration_ms=(time.perf_counter() - start) * 1000,
            context={"query_key": repr(entry.key), "seq": seq},
        )
        self._notify(entry)
        self._schedule_gc(entry)
        return data

    async def _follow(self, entry: QueryEntry) -> Any:
        """Resolve a superseded fetch with the outcome of the newest one."""
        newer = entry.task
        if newer is not None:
            return await asyncio.shield(newer)
        if entry.error is not None:
            raise entry.error
        return entry.data

    @staticmethod
    def _on_task_done(entry: QueryEntry, task: asyncio.Task[Any]) -> None:
        entry.tasks.discard(task)
        if not task.cancelled():
            # Mark the exception as retrieved; awaiters re-raise it themselves
            task.exception()

    def _log_failure(self, entry: QueryEntry, error: Exception) -> None:
        query_context = {"query_key": repr(entry.key)}
        if isinstance(error, StorefrontError):
            log_operation_error(
                logger,
                error,
                operation=LogOperationNames.FETCH_QUERY,
                additional_context=query_context,
            )
        else:
            logger.error(
                "Query %r failed: %s",
                entry.key,
                error,
                exc_info=error,
                extra={
                    "operation": LogOperationNames.FETCH_QUERY,
                    "context": query_context,
                },
            )

    # ------------------------------------------------------------------
    # Direct access
    # ------------------------------------------------------------------

    def get_query_data(self, key: QueryKey) -> Any:
        """Return the cached data for ``key`` without fetching (None if absent)."""
        entry = self._get_entry(key)
        return entry.data if entry is not None else None

    def get_query_state(self, key: QueryKey) -> QueryState | None:
        """Return a snapshot of the entry for ``key``, or None if absent."""
        entry = self._get_entry(key)
        return entry.snapshot() if entry is not None else None

    def set_query_data(
        self,
        key: QueryKey,
        data: Any,
        *,
        stale_time: float | None = None,
    ) -> None:
        """Store ``data`` for ``key`` as if it had just been fetched.

        A fetch in flight for the key is cancelled and its response discarded.
        """
        self._check_open()
        entry = self._get_or_create(key, stale_time)
        running = list(entry.tasks)
        entry.overwrite(data, self.now())
        for task in running:
            task.cancel()
        self._notify(entry)
        self._schedule_gc(entry)

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    async def invalidate_queries(
        self,
        prefix: Sequence[Any] | None = None,
        *,
        refetch: bool = True,
    ) -> int:
        """Mark entries whose key starts with ``prefix`` as stale.

        Observed entries are refetched immediately and awaited; failures stay
        in the entries and are not raised here.

        Args:
            prefix: Leading key parts (e.g. ``("news",)``); None matches everything
            refetch: Refetch observed entries

        Returns:
            Number of entries invalidated
        """
        self._check_open()
        matched = self._match(prefix)
        tasks: list[asyncio.Task[Any]] = []
        for entry in matched:
            entry.invalidated = True
            if refetch and entry.fetcher is not None and self._has_observers(entry):
                tasks.append(self._start_fetch(entry, entry.fetcher))
            else:
                self._notify(entry)

        logger.debug("Invalidated %d queries matching %r", len(matched), prefix)
        await self._settle(tasks)
        return len(matched)

    async def refetch_stale(self) -> int:
        """Refetch every stale entry that still has observers.

        Returns:
            Number of fetches started
        """
        self._check_open()
        now = self.now()
        tasks = [
            self._start_fetch(entry, entry.fetcher)
            for entry in list(self._entries.values())
            if entry.fetcher is not None
            and entry.task is None
            and self._has_observers(entry)
            and entry.is_stale(now)
        ]
        await self._settle(tasks)
        return len(tasks)

    @staticmethod
    async def _settle(tasks: list[asyncio.Task[Any]]) -> None:
        if tasks:
            await asyncio.gather(
                *(asyncio.shield(task) for task in tasks),
                return_exceptions=True,
            )

    def cancel_queries(
        self,
        prefix: Sequence[Any] | None = None,
        *,
        exact: bool = False,
    ) -> int:
        """Cancel in-flight fetches of matching entries.

        Each entry returns to the state it had before the fetch started.

        Args:
            prefix: Leading key parts; None matches everything
            exact: Match only the entry whose key equals ``prefix``

        Returns:
            Number of entries whose fetch was cancelled
        """
        cancelled = 0
        for entry in self._match(prefix, exact):
            if not entry.tasks:
                continue
            running = list(entry.tasks)
            entry.abandon()
            for task in running:
                task.cancel()
            cancelled += 1
            logger.debug("Cancelled fetch for %r", entry.key)
            self._notify(entry)
            self._schedule_gc(entry)
        return cancelled

    def remove_queries(
        self,
        prefix: Sequence[Any] | None = None,
        *,
        exact: bool = False,
    ) -> int:
        """Drop matching entries, cancelling their fetches.

        Returns:
            Number of entries removed
        """
        matched = self._match(prefix, exact)
        for entry in matched:
            self._drop(entry)
        return len(matched)

    def _drop(self, entry: QueryEntry) -> None:
        self._cancel_gc(entry)
        if entry.tasks:
            running = list(entry.tasks)
            entry.abandon()
            for task in running:
                task.cancel()
        self._entries.pop(entry.key_hash, None)

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def _schedule_gc(self, entry: QueryEntry) -> None:
        if self._closed or entry.task is not None or self._has_observers(entry):
            return
        self._cancel_gc(entry)
        entry.inactive_since = self.now()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the entry is collected by purge_inactive() instead
            return
        entry.gc_handle = loop.call_later(entry.gc_time, self._collect, entry.key_hash)

    @staticmethod
    def _cancel_gc(entry: QueryEntry) -> None:
        if entry.gc_handle is not None:
            entry.gc_handle.cancel()
            entry.gc_handle = None
        entry.inactive_since = None

    def _collect(self, digest: str) -> None:
        entry = self._entries.get(digest)
        if entry is None or entry.task is not None or self._has_observers(entry):
            return
        entry.gc_handle = None
        del self._entries[digest]
        logger.debug("Collected inactive query %r", entry.key)

    def purge_inactive(self) -> int:
        """Drop entries that have been without observers for their gc_time.

        Returns:
            Number of entries removed
        """
        now = self.now()
        expired = [
            entry
            for entry in self._entries.values()
            if entry.inactive_since is not None
            and entry.task is None
            and not self._has_observers(entry)
            and now - entry.inactive_since >= entry.gc_time
        ]
        for entry in expired:
            self._drop(entry)
        if expired:
            logger.debug("Purged %d inactive queries", len(expired))
        return len(expired)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Cancel every fetch and gc timer and drop all entries.

        The cache cannot be used afterwards.
        """
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()

        running: list[asyncio.Task[Any]] = []
        for entry in self._entries.values():
            self._cancel_gc(entry)
            running.extend(entry.tasks)
            for task in entry.tasks:
                task.cancel()

        if running:
            await asyncio.gather(*running, return_exceptions=True)
        self._entries.clear()
        logger.debug("Query cache closed (%d fetches cancelled)", len(running))

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with entry, observer and fetch counters
        """
        return {
            "entries": len(self._entries),
            "in_flight": sum(1 for entry in self._entries.values() if entry.task is not None),
            "observed": len(self._listeners),
            "hits": self._hits,
            "joins": self._joins,
            "fetches": self._fetches,
            "superseded": self._superseded,
        }


__all__ = ["Listener", "QueryCache"]
