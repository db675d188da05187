"""
rate_limiter.py - Fixed-window request budget for Gateway calls

At most ``max_requests`` acquisitions start per window. Windows are aligned to
reset points, not sliding. A caller that finds the budget empty sleeps until
the window ends and tries again.

Usage:
    limiter = RateLimiter(max_requests=10, window_ms=1000)
    await limiter.acquire()   # then issue exactly one request
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from loguru import logger


Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class RateLimiter:
    """
    Fixed-window token bucket.

    Refill and decrement happen with no await in between, so concurrent
    coroutines on one event loop cannot both take the last token.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_ms: float = 1000.0,
        clock: Clock = monotonic_ms,
        sleep: Sleeper = asyncio.sleep,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_ms <= 0:
            raise ValueError("window_ms must be > 0")
        self.max_requests = int(max_requests)
        self.window_ms = float(window_ms)
        self._clock = clock
        self._sleep = sleep
        self._tokens = self.max_requests
        self._window_start = clock()

    @property
    def tokens(self) -> int:
        return self._tokens

    async def acquire(self) -> None:
        while True:
            now = self._clock()
            elapsed = now - self._window_start

            if elapsed >= self.window_ms:
                self._tokens = self.max_requests
                self._window_start = now
                elapsed = 0.0

            if self._tokens > 0:
                self._tokens -= 1
                return

            wait_ms = self.window_ms - elapsed
            logger.debug(f"RATE_LIMIT | throttled | wait_ms={wait_ms:.0f}")
            await self._sleep(wait_ms / 1000.0)
