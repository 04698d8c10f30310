"""
Pytest configuration and shared fixtures for storefront-query tests.

This module provides the fake clock, fetchers, query cache and mocked
resource client used across the test modules.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from storefront_query.config import ApiSettings, reset_config
from storefront_query.services.api_client import StorefrontApiClient
from storefront_query.services.api_models import ApiEnvelope
from storefront_query.services.query_cache import NO_RETRY, QueryCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Coroutine function recording its calls.

    Call ``n`` returns ``results[n]`` (the last result repeats); exceptions
    are raised. With ``gated=True`` every call blocks until released, so
    tests control completion order.
    """

    def __init__(self, *results: Any, gated: bool = False) -> None:
        self.results = list(results)
        self.gated = gated
        self.calls = 0
        self.gates: list[asyncio.Event] = []

    async def __call__(self) -> Any:
        index = self.calls
        self.calls += 1
        if self.gated:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()
        if not self.results:
            return {"call": index}
        result = self.results[min(index, len(self.results) - 1)]
        if isinstance(result, BaseException):
            raise result
        return result

    def release(self, index: int = -1) -> None:
        self.gates[index].set()

    async def wait_for_calls(self, count: int) -> None:
        for _ in range(100):
            if self.calls >= count:
                return
            await asyncio.sleep(0)
        msg = f"expected {count} calls, got {self.calls}"
        raise AssertionError(msg)


def make_envelope(data: Any = None, **extra: Any) -> ApiEnvelope:
    """Build a success envelope."""
    return ApiEnvelope(success=True, data=data, **extra)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch):
    """Keep the global settings singleton and environment out of tests."""
    for name in list(os.environ):
        if name.startswith("STOREFRONT_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher_factory():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest_asyncio.fixture
async def cache(clock: FakeClock) -> AsyncGenerator[QueryCache, None]:
    """Isolated query cache without retries, closed after the test."""
    query_cache = QueryCache(NO_RETRY, clock=clock)
    yield query_cache
    await query_cache.close()


@pytest.fixture
def api_client() -> MagicMock:
    """Resource client double whose ``get`` answers with an empty success envelope."""
    client = MagicMock(spec=StorefrontApiClient)
    client.settings = ApiSettings()
    client.get = AsyncMock(return_value=make_envelope([]))
    client.close = AsyncMock()
    return client


@pytest.fixture
def envelope_factory():
    """Factory for success envelopes."""
    return make_envelope
