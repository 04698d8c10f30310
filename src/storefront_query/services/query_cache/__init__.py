"""Query cache package.

Entries, status state machine, retry policy, the shared QueryCache store and
the QueryObserver handles built on top of it.
"""

from __future__ import annotations

from .cache import Listener, QueryCache
from .entry import Fetcher, QueryEntry, QueryState
from .observer import QueryObserver, QueryResult, ResultListener
from .retry import NO_RETRY, RetryPolicy
from .state_machine import QueryStateMachine, QueryStatus

__all__ = [
    "NO_RETRY",
    "Fetcher",
    "Listener",
    "QueryCache",
    "QueryEntry",
    "QueryObserver",
    "QueryResult",
    "QueryState",
    "QueryStateMachine",
    "QueryStatus",
    "ResultListener",
    "RetryPolicy",
]
