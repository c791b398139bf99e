import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional


class RateLimiter:
    """
    Spaces consecutive outbound calls by at least ``60 / requests_per_minute``
    seconds. Callers await ``acquire()`` before each call.

    ``clock`` and ``sleep`` can be swapped for deterministic tests.
    """

    def __init__(self, requests_per_minute: int,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.logger = logging.getLogger(__name__)
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.min_interval = 60.0 / requests_per_minute
        self._clock = clock
        self._sleep = sleep
        self._next_allowed: Optional[float] = None
        self._lock: Optional[asyncio.Lock] = None
        self.calls = 0
        self.total_wait = 0.0

    async def acquire(self) -> float:
        """
        Wait for the next call slot.

        Returns:
            float: Seconds spent waiting
        """
        # Lock is bound to the running loop, so it is created on first use
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            waited = 0.0
            now = self._clock()
            if self._next_allowed is not None and now < self._next_allowed:
                waited = self._next_allowed - now
                self.logger.debug(f"Rate limiting: waiting {waited:.2f}s before call {self.calls + 1}")
                await self._sleep(waited)
                now = self._clock()

            self._next_allowed = now + self.min_interval
            self.calls += 1
            self.total_wait += waited
            return waited
