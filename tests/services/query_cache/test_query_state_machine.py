"""Unit tests for QueryStateMachine."""

import pytest

from storefront_query.services.query_cache import QueryStateMachine, QueryStatus
from storefront_query.shared.errors import ApplicationError, ErrorCode


class TestQueryStateMachine:
    """Test cases for QueryStateMachine."""

    def test_initial_state_is_pending(self):
        sm = QueryStateMachine()

        assert sm.state == QueryStatus.PENDING
        assert sm.get_stats() == {"state": "pending", "transitions": 0}

    @pytest.mark.parametrize(
        ("start", "target"),
        [
            (QueryStatus.PENDING, QueryStatus.SUCCESS),
            (QueryStatus.PENDING, QueryStatus.ERROR),
            (QueryStatus.PENDING, QueryStatus.PENDING),
            (QueryStatus.SUCCESS, QueryStatus.PENDING),
            (QueryStatus.ERROR, QueryStatus.PENDING),
        ],
    )
    def test_allowed_transitions(self, start, target):
        sm = QueryStateMachine(start)
        assert sm.can_transition(target) is True

        previous = sm.transition(target)

        assert previous == start
        assert sm.state == target

    @pytest.mark.parametrize(
        ("start", "target"),
        [
            (QueryStatus.SUCCESS, QueryStatus.ERROR),
            (QueryStatus.SUCCESS, QueryStatus.SUCCESS),
            (QueryStatus.ERROR, QueryStatus.SUCCESS),
            (QueryStatus.ERROR, QueryStatus.ERROR),
        ],
    )
    def test_rejected_transitions(self, start, target):
        sm = QueryStateMachine(start)
        assert sm.can_transition(target) is False

        with pytest.raises(ApplicationError) as exc_info:
            sm.transition(target)

        assert exc_info.value.code == ErrorCode.QUERY_INVALID_TRANSITION
        assert exc_info.value.context.additional_data == {
            "from_status": start.value,
            "to_status": target.value,
        }
        assert sm.state == start

    def test_restore_bypasses_transition_table(self):
        sm = QueryStateMachine(QueryStatus.SUCCESS)
        sm.transition(QueryStatus.PENDING)

        sm.restore(QueryStatus.SUCCESS)

        assert sm.state == QueryStatus.SUCCESS

    def test_stats_count_transitions(self):
        sm = QueryStateMachine()
        sm.transition(QueryStatus.SUCCESS)
        sm.transition(QueryStatus.PENDING)

        assert sm.get_stats() == {"state": "pending", "transitions": 2}
