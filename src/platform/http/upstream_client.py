"""
Upstream HTTP Client Base

Shared request path for third-party REST APIs (movie catalog, payment
gateway): one pooled `httpx.AsyncClient`, bounded retry through an injected
RetryPolicy, and translation of transport/status failures into the upstream
error family. Raw upstream bodies are logged, never surfaced to callers.
"""

from typing import Any, Optional

import httpx

from src.platform.exception.exceptions import (
    NotFoundError,
    RateLimitedError,
    UpstreamError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from src.platform.http.retry_policy import RetryPolicy
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics


def is_retryable(error: Exception) -> bool:
    return isinstance(error, UpstreamError) and error.retryable


class UpstreamHttpClient:
    SERVICE_NAME: str = 'upstream'
    UNAVAILABLE_MESSAGE: str = 'Service temporarily unavailable. Please try again later.'
    REJECTED_MESSAGE: str = 'Invalid API configuration. Please contact support.'
    RATE_LIMITED_MESSAGE: str = 'Too many requests. Please wait a moment and try again.'
    NOT_FOUND_MESSAGE: str = 'Resource not found'
    FAILED_MESSAGE: str = 'Upstream request failed. Please try again.'

    def __init__(
        self,
        *,
        base_url: str,
        headers: dict[str, str],
        timeout: float,
        retry_policy: RetryPolicy,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url
        self.headers = headers
        self.timeout = timeout
        self.retry_policy = retry_policy
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self.transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        async def attempt() -> httpx.Response:
            return await self._send_once(method, path, **kwargs)

        try:
            response = await self.retry_policy.execute(
                attempt,
                retryable=is_retryable,
                label=self.SERVICE_NAME.upper(),
                on_retry=lambda: metrics.record_upstream_retry(service=self.SERVICE_NAME),
            )
        except UpstreamError as e:
            metrics.record_upstream(service=self.SERVICE_NAME, result=type(e).__name__)
            raise
        except NotFoundError:
            metrics.record_upstream(service=self.SERVICE_NAME, result='not_found')
            raise
        metrics.record_upstream(service=self.SERVICE_NAME, result='ok')
        return response

    async def _send_once(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._get_client().request(method, path, **kwargs)
        except httpx.TransportError as e:
            Logger.base.warning(f'🌐 [{self.SERVICE_NAME.upper()}] {method} {path} transport error: {e!r}')
            raise UpstreamUnavailableError(self.UNAVAILABLE_MESSAGE) from e

        if response.is_success:
            return response

        status = response.status_code
        Logger.base.warning(
            f'🌐 [{self.SERVICE_NAME.upper()}] {method} {path} -> {status}: {response.text[:300]}'
        )
        if status >= 500:
            raise UpstreamUnavailableError(self.UNAVAILABLE_MESSAGE)
        if status == 429:
            raise RateLimitedError(self.RATE_LIMITED_MESSAGE)
        if status in (401, 403):
            raise UpstreamRejectedError(self.REJECTED_MESSAGE)
        if status == 404:
            raise NotFoundError(self.NOT_FOUND_MESSAGE)
        raise UpstreamError(self.FAILED_MESSAGE)
