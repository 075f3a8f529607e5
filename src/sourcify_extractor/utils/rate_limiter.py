"""Token bucket shared by every coroutine talking to the registry."""

import asyncio
import time
from typing import Callable, Optional


class TokenBucket:
    """Asynchronous token bucket.

    Tokens refill continuously at ``rate`` per second up to ``capacity``; the
    bucket starts full so the first ``capacity`` acquisitions do not wait.
    """

    def __init__(
        self,
        rate: float,
        capacity: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be > 0")
        if capacity is None:
            capacity = rate * 2
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.rate = float(rate)
        self.capacity = float(capacity)
        self._clock = clock
        self._tokens = self.capacity
        self._updated_at = clock()
        self._lock = asyncio.Lock()

    @classmethod
    def per_second(cls, requests_per_second: int) -> "TokenBucket":
        """Bucket allowing ``requests_per_second`` with a burst of twice that."""
        return cls(rate=requests_per_second, capacity=requests_per_second * 2)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._updated_at
        self._updated_at = now
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens

    async def acquire(self) -> None:
        """Take one token, suspending until one is available."""
        # Waiters queue on the lock so tokens are handed out in arrival order.
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                await asyncio.sleep((1 - self._tokens) / self.rate)
                self._refill()
            self._tokens -= 1
