"""
Rate limiting utility for catalog requests
"""
import asyncio
import time
from collections import deque
from typing import Awaitable, Callable, Optional
import logging

logger = logging.getLogger(__name__)


class AsyncRateLimiter:
    """
    Rate limiter that enforces requests per minute limit
    Uses sliding window algorithm; safe to share between concurrent tasks
    """

    def __init__(
        self,
        requests_per_minute: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize rate limiter

        Args:
            requests_per_minute: Maximum number of requests allowed per minute
            clock: Monotonic time source
            sleep: Coroutine used to wait
        """
        self.requests_per_minute = requests_per_minute
        self.request_times: deque = deque()
        self.last_request_time: Optional[float] = None
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    def _cleanup_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute"""
        while self.request_times and current_time - self.request_times[0] > 60.0:
            self.request_times.popleft()

    async def wait_if_needed(self) -> None:
        """
        Wait if necessary to respect rate limit
        Should be awaited before each request
        """
        if not self.requests_per_minute:
            return

        async with self._lock:
            current_time = self._clock()
            self._cleanup_old_requests(current_time)

            if len(self.request_times) >= self.requests_per_minute:
                oldest_time = self.request_times[0]
                wait_time = 60.0 - (current_time - oldest_time) + 0.1
                if wait_time > 0:
                    logger.debug("Rate limit reached. Waiting %.2f seconds", wait_time)
                    await self._sleep(wait_time)
                    current_time = self._clock()
                    self._cleanup_old_requests(current_time)

            now = self._clock()
            self.request_times.append(now)
            self.last_request_time = now

    def get_stats(self) -> dict:
        """Get current rate limiter statistics"""
        self._cleanup_old_requests(self._clock())
        return {
            'requests_in_last_minute': len(self.request_times),
            'limit': self.requests_per_minute,
            'last_request_time': self.last_request_time
        }
