"""
Retry utilities for the extractor.

Transient failures are retried with exponential backoff; everything else
propagates to the caller on the first attempt.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

T = TypeVar('T')


class TransientError(Exception):
    """Marks a failure that is worth another attempt.

    ``cause`` is the error surfaced to the caller once retries run out.
    """

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(str(cause))


def backoff_delay(
    attempt: int,
    initial_delay: float = 0.5,
    max_delay: float = 8.0,
    backoff_factor: float = 2.0,
    jitter: float = 0.2,
) -> float:
    """Exponential backoff for the given zero-based retry attempt, with small jitter."""
    delay = min(max_delay, initial_delay * (backoff_factor ** attempt))
    return delay * (1.0 + random.random() * jitter)


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    initial_delay: float = 0.5,
    max_delay: float = 8.0,
    backoff_factor: float = 2.0,
    retry_on: Tuple[Type[Exception], ...] = (TransientError,),
    logger: Optional[logging.Logger] = None,
    description: str = "",
) -> T:
    """
    Await ``func`` until it succeeds or the retry budget is spent.

    Args:
        func: Zero-argument coroutine factory, called once per attempt
        max_retries: Attempts made after the first one
        initial_delay: Delay before the first retry in seconds
        max_delay: Upper bound for a single delay in seconds
        backoff_factor: Factor by which the delay grows after each retry
        retry_on: Exception types that trigger a retry
        logger: Logger used to report retries
        description: Label of the operation in log messages

    Returns:
        Result of the first successful attempt

    Raises:
        The ``cause`` of the last TransientError, or the last retried exception
    """
    logger = logger or logging.getLogger(__name__)
    attempt = 0
    while True:
        try:
            return await func()
        except retry_on as e:
            if attempt >= max_retries:
                if isinstance(e, TransientError):
                    raise e.cause from e
                raise
            delay = backoff_delay(attempt, initial_delay, max_delay, backoff_factor)
            attempt += 1
            logger.warning(
                "Retry %d/%d for %s after %.2fs: %s",
                attempt, max_retries, description or getattr(func, "__qualname__", "call"), delay, e
            )
            await asyncio.sleep(delay)
