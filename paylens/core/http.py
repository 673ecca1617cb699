"""HTTP transport with bounded retry and error normalization.

All failures leave this module as NetworkError; callers never see httpx
exception types.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from paylens import __version__
from paylens.config import get_settings
from paylens.core.exceptions import NetworkError

USER_AGENT = f"paylens-python/{__version__}"

# Backoff: 1s, 2s, 4s, 8s, then capped at 10s
RETRY_WAIT = wait_exponential(multiplier=1, max=10)


def is_retryable(error: BaseException) -> bool:
    """Connection failures and 5xx responses are retryable, nothing else."""
    return isinstance(error, NetworkError) and (
        error.status_code is None or error.status_code >= 500
    )


class HttpClient:
    """JSON HTTP client bound to one base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        retries: int | None = None,
        headers: dict[str, str] | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        if timeout is None or retries is None:
            settings = get_settings()
            timeout = timeout or settings.default_timeout
            retries = retries or settings.default_retries

        self.base_url = base_url
        self.timeout = timeout
        self.retries = retries
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)

        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=self.timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
                **(headers or {}),
            },
        )

    @property
    def headers(self) -> httpx.Headers:
        return self._client.headers

    def update_headers(self, headers: dict[str, str]) -> None:
        """Merge headers into the client defaults (e.g. rotated auth tokens)."""
        self._client.headers.update(headers)

    async def get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        return await self._execute_with_retry("GET", url, params=params)

    async def post(self, url: str, data: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self._execute_with_retry("POST", url, json=data, params=params)

    async def put(self, url: str, data: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self._execute_with_retry("PUT", url, json=data, params=params)

    async def patch(self, url: str, data: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self._execute_with_retry("PATCH", url, json=data, params=params)

    async def delete(self, url: str, params: dict[str, Any] | None = None) -> Any:
        return await self._execute_with_retry("DELETE", url, params=params)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _execute_with_retry(self, method: str, url: str, **kwargs: Any) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retries),
            wait=RETRY_WAIT,
            retry=retry_if_exception(is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(self._send, method, url, **kwargs)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        method, url = retry_state.args[:2]
        self._logger.warning(
            f"{method} {url} failed on attempt {retry_state.attempt_number}/{self.retries} "
            f"(status: {getattr(error, 'status_code', None)}), "
            f"retrying in {retry_state.next_action.sleep:.1f}s"
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        self._logger.debug(f"[PayLens] {method} {url}")

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(
                "No response received from server (request timed out)", cause=e
            ) from e
        except httpx.RequestError as e:
            raise NetworkError("No response received from server", cause=e) from e
        except httpx.InvalidURL as e:
            raise NetworkError("Request setup failed", cause=e) from e

        body = _decode_body(response)

        if response.is_error:
            detail = body.get("message") if isinstance(body, dict) else None
            raise NetworkError(
                f"HTTP {response.status_code}: {detail or response.reason_phrase}",
                status_code=response.status_code,
                response=body,
            )

        return body


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to raw text for non-JSON payloads."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
