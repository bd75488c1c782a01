"""Async REST client for the persistence backend."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from webmarker.domain.exceptions import NetworkFailure, NotFound

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from typing import Self

    from webmarker.config import BackendConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP status codes that should trigger a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.5  # seconds
DEFAULT_MAX_DELAY = 10.0  # seconds
DEFAULT_JITTER = 0.1  # 10% jitter


def _is_retryable_error(exc: Exception) -> bool:
    """Check if an exception is worth retrying.

    Args:
        exc: The exception to check

    Returns:
        True for connection errors, timeouts and retryable status codes
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.TransportError, httpx.TimeoutException))


def _calculate_delay(attempt: int, base_delay: float, max_delay: float, jitter: float) -> float:
    delay = min(base_delay * (2**attempt), max_delay)
    return delay + delay * jitter * random.random()


def _status_code(exc: Exception) -> int | None:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    jitter: float = DEFAULT_JITTER,
    operation_name: str = "operation",
) -> T:
    """Execute an async function with exponential backoff retry.

    Args:
        func: Async function to execute
        max_retries: Maximum number of retry attempts
        base_delay: Base delay between retries in seconds
        max_delay: Maximum delay between retries
        jitter: Random jitter factor to add to delay
        operation_name: Name of operation for logging

    Returns:
        Result of the function

    Raises:
        NetworkFailure: If all retries are exhausted
    """
    attempt = 0
    while True:
        try:
            return await func()
        except Exception as e:
            if not _is_retryable_error(e):
                raise

            if attempt >= max_retries:
                logger.error(
                    "backend_retry_exhausted",
                    extra={
                        "operation": operation_name,
                        "attempts": attempt + 1,
                        "error": str(e),
                    },
                )
                raise NetworkFailure(
                    f"{operation_name} failed after {attempt + 1} attempts: {e}",
                    status_code=_status_code(e),
                ) from e

            delay = _calculate_delay(attempt, base_delay, max_delay, jitter)
            logger.warning(
                "backend_retry_attempt",
                extra={
                    "operation": operation_name,
                    "attempt": attempt + 1,
                    "max_retries": max_retries,
                    "delay_seconds": round(delay, 2),
                    "error": str(e),
                },
            )
            await asyncio.sleep(delay)
            attempt += 1


class BackendClient:
    """Async HTTP client for the bookmark/mark/tag resources.

    Responses are decoded JSON. Errors surface as ``NotFound`` for 404 and
    ``NetworkFailure`` for everything else.
    """

    # Default per-operation timeouts (seconds)
    DEFAULT_TIMEOUTS: dict[str, float] = {
        "list": 30.0,
        "get": 15.0,
        "create": 15.0,
        "update": 15.0,
        "delete": 15.0,
        "login": 15.0,
    }

    def __init__(
        self,
        api_url: str,
        timeout: float = 15.0,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        retry_max_delay: float = DEFAULT_MAX_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the backend client.

        Args:
            api_url: Base URL of the backend (e.g., http://localhost:3000)
            timeout: Default request timeout in seconds
            max_retries: Maximum number of retry attempts for transient failures
            retry_base_delay: Base delay between retries in seconds
            retry_max_delay: Maximum delay between retries in seconds
            transport: Optional httpx transport, used by tests to serve requests in memory
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._transport = transport
        self._token: str | None = None
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls, config: BackendConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> BackendClient:
        return cls(
            config.api_url,
            timeout=config.timeout_sec,
            max_retries=config.max_retries,
            retry_base_delay=config.retry_base_delay,
            retry_max_delay=config.retry_max_delay,
            transport=transport,
        )

    def get_timeout(self, operation: str) -> float:
        return min(self.DEFAULT_TIMEOUTS.get(operation, self.timeout), self.timeout)

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        """Attach (or with ``None`` detach) the bearer token sent with every request."""
        self._token = token or None
        if self._client is None:
            return
        if self._token:
            self._client.headers["Authorization"] = f"Bearer {self._token}"
        else:
            self._client.headers.pop("Authorization", None)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            )

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Exit async context."""
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client."""
        if self._client is None:
            raise NetworkFailure("Client not initialized. Use async context manager.")
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        **kwargs: Any,
    ) -> Any:
        timeout = self.get_timeout(operation)
        operation_name = f"{method} {path}"

        async def _send() -> httpx.Response:
            response = await self.client.request(method, path, timeout=timeout, **kwargs)
            response.raise_for_status()
            return response

        try:
            response = await retry_with_backoff(
                _send,
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                max_delay=self.retry_max_delay,
                operation_name=operation_name,
            )
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 404:
                raise NotFound(f"{operation_name} returned 404", {"path": path}) from exc
            raise NetworkFailure(
                f"{operation_name} returned {status}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"{operation_name} failed: {exc}") from exc

        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        operation = "get" if params is None and path.count("/") > 1 else "list"
        return await self._request("GET", path, operation=operation, params=params)

    async def post(self, path: str, payload: Any, *, operation: str = "create") -> Any:
        return await self._request("POST", path, operation=operation, json=payload)

    async def put(self, path: str, payload: Any) -> Any:
        return await self._request("PUT", path, operation="update", json=payload)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path, operation="delete")
