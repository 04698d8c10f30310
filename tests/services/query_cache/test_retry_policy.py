"""Tests for the query retry policy."""

from unittest.mock import AsyncMock, patch

import pytest

from storefront_query.config import QuerySettings
from storefront_query.services.query_cache import RetryPolicy
from storefront_query.shared.errors import (
    ApiNetworkError,
    ApiResponseError,
    ErrorCode,
    ServiceReportedError,
)


def _response_error(status_code: int) -> ApiResponseError:
    return ApiResponseError(ErrorCode.API_REQUEST_FAILED, "failed", status_code=status_code)


class TestRetryPolicyDelays:
    def test_exponential_backoff_is_capped(self):
        policy = RetryPolicy(max_retries=10, base_delay=1.0, max_delay=30.0)

        delays = [policy.delay_for(attempt) for attempt in range(7)]

        assert delays == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0]

    def test_from_settings(self):
        settings = QuerySettings(retry_attempts=5, retry_delay=0.5, retry_delay_max=4.0)

        policy = RetryPolicy.from_settings(settings)

        assert policy == RetryPolicy(max_retries=5, base_delay=0.5, max_delay=4.0)

    def test_defaults(self):
        policy = RetryPolicy()

        assert policy.max_retries == 3
        assert policy.base_delay == 1.0
        assert policy.max_delay == 30.0


class TestRetryPolicyDecisions:
    @pytest.mark.parametrize(
        "error",
        [
            ApiNetworkError(ErrorCode.NETWORK_ERROR, "connection reset"),
            _response_error(500),
            _response_error(503),
            _response_error(429),
            RuntimeError("boom"),
        ],
    )
    def test_retryable_errors(self, error):
        assert RetryPolicy(max_retries=3).should_retry(error, 0) is True

    @pytest.mark.parametrize(
        "error",
        [
            _response_error(400),
            _response_error(401),
            _response_error(404),
            ServiceReportedError("Account not found"),
        ],
    )
    def test_non_retryable_errors(self, error):
        assert RetryPolicy(max_retries=3).should_retry(error, 0) is False

    def test_gives_up_after_max_retries(self):
        policy = RetryPolicy(max_retries=2)
        error = ApiNetworkError(ErrorCode.API_TIMEOUT, "timeout")

        assert policy.should_retry(error, 1) is True
        assert policy.should_retry(error, 2) is False

    def test_zero_retries_never_retries(self):
        error = ApiNetworkError(ErrorCode.NETWORK_ERROR, "down")

        assert RetryPolicy(max_retries=0).should_retry(error, 0) is False


class TestRetryPolicyRun:
    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        policy = RetryPolicy(max_retries=3, base_delay=1.0, max_delay=30.0)
        fn = AsyncMock(
            side_effect=[
                ApiNetworkError(ErrorCode.NETWORK_ERROR, "down"),
                ApiNetworkError(ErrorCode.NETWORK_ERROR, "down"),
                "ok",
            ]
        )

        with patch("asyncio.sleep", new=AsyncMock()) as mock_sleep:
            result = await policy.run(fn)

        assert result == "ok"
        assert fn.await_count == 3
        assert [call.args[0] for call in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_raises_last_error_when_exhausted(self):
        policy = RetryPolicy(max_retries=2, base_delay=0.0, max_delay=0.0)
        errors = [ApiNetworkError(ErrorCode.NETWORK_ERROR, f"attempt {i}") for i in range(3)]
        fn = AsyncMock(side_effect=errors)

        with pytest.raises(ApiNetworkError) as exc_info:
            await policy.run(fn)

        assert exc_info.value is errors[-1]
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_client_error_fails_immediately(self):
        policy = RetryPolicy(max_retries=3, base_delay=0.0, max_delay=0.0)
        fn = AsyncMock(side_effect=_response_error(404))

        with pytest.raises(ApiResponseError):
            await policy.run(fn)

        assert fn.await_count == 1
