"""
Utils Package

- Logging: Structured logging with JSON support
- Async HTTP Client: Rate-limited, retrying registry client
- Rate Limiter: Token bucket shared by all workers
- Error Handling: Retry with exponential backoff
"""

from .async_client import HttpResponse, ResilientHttpClient
from .error_handling import TransientError, backoff_delay, call_with_retry
from .logger import get_logger, setup_logger
from .rate_limiter import TokenBucket

__all__ = [
    # Logging
    'get_logger',
    'setup_logger',

    # Async HTTP Client
    'HttpResponse',
    'ResilientHttpClient',
    'TokenBucket',

    # Error Handling
    'TransientError',
    'backoff_delay',
    'call_with_retry',
]
