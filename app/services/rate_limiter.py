"""
Rate Limiting

Spaces outbound metadata-service calls process-wide. Every client holding
the same RateLimiter instance goes through the same gate.
"""
import asyncio
import logging
import time
from typing import Awaitable, Callable


logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Minimum-interval gate shared by all concurrent callers.

    Uses an internal asyncio.Lock so only one caller at a time can be granted
    permission; a caller arriving too early sleeps (holding the lock) until the
    interval since the previous grant has elapsed. This limits the
    instantaneous rate only, not the total number of calls.
    """

    def __init__(
        self,
        min_interval: float = 0.25,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_grant: float | None = None

    async def acquire(self) -> float:
        """
        Wait for permission to issue one call.

        Returns:
            Clock reading at which permission was granted
        """
        async with self._lock:
            while self._last_grant is not None:
                wait = self._last_grant + self.min_interval - self._clock()
                if wait <= 0:
                    break
                logger.debug("Rate limiter delaying call by %.3fs", wait)
                await self._sleep(wait)

            self._last_grant = self._clock()
            return self._last_grant

    def reset(self) -> None:
        """Forget the previous grant (mainly for testing)."""
        self._last_grant = None
