"""Storefront resource service client.

This module provides an asynchronous client for the storefront resource
service using aiohttp. It issues parameterized read requests and interprets
the ``{success, data, message?, pagination?}`` envelope:

- transport failures raise ApiNetworkError
- non-2xx responses and malformed bodies raise ApiResponseError
- ``success=false`` raises ServiceReportedError

The client performs no retries; retry policy belongs to the query cache.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import aiohttp
from pydantic import ValidationError

from storefront_query.config import ApiSettings, get_config
from storefront_query.services.api_models import ApiEnvelope
from storefront_query.shared.constants import (
    APIConfig,
    ContentTypes,
    HTTPHeaders,
    HTTPStatusCodes,
    LogOperationNames,
)
from storefront_query.shared.errors import (
    ApiNetworkError,
    ApiResponseError,
    ErrorCode,
    ErrorContext,
    ServiceReportedError,
)
from storefront_query.shared.logging import log_api_call

logger = logging.getLogger(__name__)


def _query_value(value: Any) -> str | int | float:
    """Convert a parameter value to something aiohttp accepts in a query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return value
    return str(value)


def _status_error_code(status_code: int) -> ErrorCode:
    if status_code in (HTTPStatusCodes.UNAUTHORIZED, HTTPStatusCodes.FORBIDDEN):
        return ErrorCode.API_AUTHENTICATION_FAILED
    if status_code == HTTPStatusCodes.TOO_MANY_REQUESTS:
        return ErrorCode.API_RATE_LIMIT
    if HTTPStatusCodes.is_server_error(status_code):
        return ErrorCode.API_SERVER_ERROR
    return ErrorCode.API_REQUEST_FAILED


class StorefrontApiClient:
    """Async client for the storefront resource service.

    The aiohttp session is created lazily on first use and closed by
    :meth:`close`. A session passed in by the caller is never closed here.

    Args:
        settings: API settings; defaults to the global configuration
        session: Optional externally managed aiohttp session
    """

    def __init__(
        self,
        settings: ApiSettings | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.settings = settings or get_config().api
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
        self._session_lock = asyncio.Lock()

    async def __aenter__(self) -> StorefrontApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=self._timeout,
                    headers={HTTPHeaders.ACCEPT: ContentTypes.JSON},
                )
                self._owns_session = True
                logger.debug("aiohttp.ClientSession created for %s", self.settings.base_url)
            return self._session

    async def close(self) -> None:
        """Close the owned HTTP session, if any."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def build_url(self, path: str) -> str:
        """Join an endpoint path to the configured base URL."""
        return f"{self.settings.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {HTTPHeaders.ACCEPT: ContentTypes.JSON}
        if self.settings.auth_token:
            headers[HTTPHeaders.AUTHORIZATION] = (
                f"{APIConfig.BEARER_PREFIX}{self.settings.auth_token}"
            )
        return headers

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> ApiEnvelope:
        """Issue a GET request and return the validated success envelope.

        Args:
            path: Endpoint path relative to the base URL (e.g. "/news")
            params: Query parameters; None values are dropped

        Returns:
            The response envelope with ``success=True``

        Raises:
            ApiNetworkError: If the request fails at the transport level
            ApiResponseError: If the status is not 2xx or the body is not an envelope
            ServiceReportedError: If the envelope reports ``success=false``
        """
        query = {
            key: _query_value(value)
            for key, value in (params or {}).items()
            if value is not None
        }
        context = ErrorContext(
            operation=LogOperationNames.API_GET,
            endpoint=path,
            additional_data={key: str(value) for key, value in query.items()},
        )

        session = await self._get_session()
        start = time.perf_counter()

        try:
            async with session.get(
                self.build_url(path),
                params=query,
                headers=self._headers(),
                timeout=self._timeout,
            ) as response:
                duration_ms = (time.perf_counter() - start) * 1000
                log_api_call(
                    logger,
                    endpoint=path,
                    status_code=response.status,
                    duration_ms=duration_ms,
                )

                if not HTTPStatusCodes.is_success(response.status):
                    raise ApiResponseError(
                        code=_status_error_code(response.status),
                        message=f"GET {path} failed with status {response.status}",
                        context=context,
                        status_code=response.status,
                    )

                try:
                    body = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise ApiResponseError(
                        code=ErrorCode.API_INVALID_RESPONSE,
                        message=f"GET {path} returned a body that is not JSON",
                        context=context,
                        original_error=e,
                        status_code=response.status,
                    ) from e

        except asyncio.TimeoutError as e:
            raise ApiNetworkError(
                code=ErrorCode.API_TIMEOUT,
                message=f"GET {path} timed out after {self.settings.timeout}s",
                context=context,
                original_error=e,
            ) from e
        except aiohttp.ClientError as e:
            raise ApiNetworkError(
                code=ErrorCode.NETWORK_ERROR,
                message=f"GET {path} failed: {e!s}",
                context=context,
                original_error=e,
            ) from e

        envelope = self._parse_envelope(body, path, context)

        if not envelope.success:
            raise ServiceReportedError(
                message=envelope.message or f"GET {path} reported failure",
                context=context,
                service_message=envelope.message,
                field_errors=envelope.errors,
            )

        return envelope

    @staticmethod
    def _parse_envelope(body: Any, path: str, context: ErrorContext) -> ApiEnvelope:
        try:
            return ApiEnvelope.model_validate(body)
        except ValidationError as e:
            raise ApiResponseError(
                code=ErrorCode.API_INVALID_RESPONSE,
                message=f"GET {path} returned an invalid response envelope",
                context=context,
                original_error=e,
            ) from e


__all__ = ["StorefrontApiClient"]
