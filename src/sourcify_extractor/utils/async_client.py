"""
Asynchronous HTTP client with rate limiting, retry, and timeout support.

This module provides the client shared by every chain worker:
- Token-bucket rate limiting applied before each attempt
- Automatic retry with exponential backoff on transient failures
- Optional per-call timeout
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from ..exceptions import DecodeError, HttpError
from .error_handling import TransientError, call_with_retry
from .logger import get_logger
from .rate_limiter import TokenBucket

DEFAULT_USER_AGENT = "sourcify-extractor/0.1"

# 408 and 429 are retried alongside server errors.
TRANSIENT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class HttpResponse:
    """Successful response with its body already read."""
    url: str
    status: int
    body: str

    def json(self) -> Any:
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise DecodeError(f"invalid JSON from {self.url}: {e}") from e


def is_transient_status(status: int) -> bool:
    return status in TRANSIENT_STATUSES or status >= 500


class ResilientHttpClient:
    """Asynchronous HTTP client with rate limiting and retry.

    A single instance is meant to be shared by all concurrent callers; the
    session and the token bucket are its only state.
    """

    def __init__(
        self,
        base_url: str = "",
        rate_limiter: Optional[TokenBucket] = None,
        timeout: Optional[float] = 60.0,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        max_retry_delay: float = 8.0,
        backoff_factor: float = 2.0,
        headers: Optional[Dict[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the async HTTP client.

        Args:
            base_url: Base URL prepended to relative paths
            rate_limiter: Token bucket consulted before each attempt (None for no limit)
            timeout: Total timeout of one attempt in seconds (None for no timeout)
            max_retries: Maximum number of retry attempts
            retry_delay: Initial delay between retries in seconds
            max_retry_delay: Upper bound of a single retry delay in seconds
            backoff_factor: Multiplier for exponential backoff
            headers: Extra headers sent with every request
            logger: Custom logger instance

        Raises:
            ValueError: If configuration is invalid
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        if backoff_factor < 1.0:
            raise ValueError("backoff_factor must be >= 1.0")

        self.base_url = base_url.rstrip('/')
        self.rate_limiter = rate_limiter
        self.timeout = ClientTimeout(total=timeout)
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.backoff_factor = backoff_factor
        self.headers = {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json",
            **(headers or {}),
        }
        self.logger = logger or get_logger('http')
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> 'ResilientHttpClient':
        """Async context manager entry."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def open(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    @property
    def session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError("client is not open; use 'async with' or call open()")
        return self._session

    def _url(self, url: str) -> str:
        if url.startswith(('http://', 'https://')):
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    async def _attempt(self, method: str, url: str, **kwargs: Any) -> HttpResponse:
        """Make one rate-limited request.

        Raises:
            TransientError: Wrapping an HttpError worth retrying
            HttpError: For non-transient failures
            DecodeError: If a successful response body is not valid text
        """
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()

        try:
            async with self.session.request(method, url, **kwargs) as response:
                raw = await response.read()
                status = response.status
                encoding = response.charset or "utf-8"
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransientError(HttpError(url, None, str(e) or type(e).__name__)) from e

        self.logger.debug("%s %s -> %d", method, url, status)

        if 200 <= status < 300:
            try:
                body = raw.decode(encoding)
            except (UnicodeDecodeError, LookupError) as e:
                raise DecodeError(f"undecodable body from {url}: {e}") from e
            return HttpResponse(url=url, status=status, body=body)

        error = HttpError(url, status, raw[:200].decode("utf-8", errors="replace"))
        if is_transient_status(status):
            raise TransientError(error)
        raise error

    async def request(self, method: str, url: str, *, retry: bool = True, **kwargs: Any) -> HttpResponse:
        """Make an HTTP request, retrying transient failures.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Absolute URL or path relative to base_url
            retry: Whether transient failures are retried
            **kwargs: Additional arguments to pass to aiohttp.ClientSession.request()

        Returns:
            HttpResponse: The successful response

        Raises:
            HttpError: If the request fails or returns a non-2xx status
            DecodeError: If a successful response body cannot be decoded
        """
        url = self._url(url)
        return await call_with_retry(
            lambda: self._attempt(method, url, **kwargs),
            max_retries=self.max_retries if retry else 0,
            initial_delay=self.retry_delay,
            max_delay=self.max_retry_delay,
            backoff_factor=self.backoff_factor,
            logger=self.logger,
            description=f"{method} {url}",
        )

    # Convenience methods
    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> HttpResponse:
        """Make a GET request."""
        return await self.request("GET", url, params=params)

    async def get_json(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a GET request and decode the JSON body."""
        response = await self.get(url, params=params)
        return response.json()

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        *,
        headers: Optional[Dict[str, str]] = None,
        retry: bool = True,
    ) -> Any:
        """Make a POST request with a JSON body and decode the JSON response."""
        response = await self.request("POST", url, json=payload, headers=headers, retry=retry)
        if not response.body:
            return {}
        return response.json()
