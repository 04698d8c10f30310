"""Query status state machine.

This module provides the state machine that governs the lifecycle status of a
cache entry. Every status change of an entry goes through
:meth:`QueryStateMachine.transition`, so an illegal change (for example
``success -> error`` without an intervening fetch) fails loudly instead of
producing an inconsistent entry.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from storefront_query.shared.errors import ApplicationError, ErrorCode, ErrorContext


class QueryStatus(str, Enum):
    """Lifecycle status of a query."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


# PENDING -> PENDING happens when a newer fetch supersedes one in flight.
_ALLOWED_TRANSITIONS: dict[QueryStatus, frozenset[QueryStatus]] = {
    QueryStatus.PENDING: frozenset(
        {QueryStatus.PENDING, QueryStatus.SUCCESS, QueryStatus.ERROR}
    ),
    QueryStatus.SUCCESS: frozenset({QueryStatus.PENDING}),
    QueryStatus.ERROR: frozenset({QueryStatus.PENDING}),
}


class QueryStateMachine:
    """State machine for a single query entry.

    Args:
        initial: Starting status (default: PENDING)
    """

    def __init__(self, initial: QueryStatus = QueryStatus.PENDING) -> None:
        self._state = initial
        self._transitions = 0

    @property
    def state(self) -> QueryStatus:
        """Get the current status."""
        return self._state

    def can_transition(self, target: QueryStatus) -> bool:
        """Check whether moving to ``target`` is allowed from the current status."""
        return target in _ALLOWED_TRANSITIONS[self._state]

    def transition(self, target: QueryStatus) -> QueryStatus:
        """Move to ``target``.

        Args:
            target: Status to move to

        Returns:
            The previous status

        Raises:
            ApplicationError: If the transition is not allowed
        """
        if not self.can_transition(target):
            raise ApplicationError(
                ErrorCode.QUERY_INVALID_TRANSITION,
                f"Invalid query status transition: {self._state.value} -> {target.value}",
                ErrorContext(
                    operation="query_transition",
                    additional_data={
                        "from_status": self._state.value,
                        "to_status": target.value,
                    },
                ),
            )

        previous = self._state
        self._state = target
        self._transitions += 1
        return previous

    def restore(self, status: QueryStatus) -> None:
        """Put back a status saved before a fetch that was cancelled.

        Cancellation rolls an entry back rather than moving it forward,
        so it bypasses the transition table.
        """
        self._state = status

    def get_stats(self) -> dict[str, Any]:
        """Get state machine statistics.

        Returns:
            Dictionary with the current status and the number of transitions
        """
        return {
            "state": self._state.value,
            "transitions": self._transitions,
        }


__all__ = ["QueryStateMachine", "QueryStatus"]
