"""Request throttle that keeps PhishTank calls evenly spaced."""

import asyncio
import logging

from phishtank_mcp.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class RateThrottle:
    """
    Enforces a minimum delay between consecutive requests.

    The interval is 60 / requests_per_minute seconds. Unused budget never
    accumulates: after a long idle period the next call goes through
    immediately, but the one after it still waits a full interval.

    Example:
        throttle = RateThrottle(requests_per_minute=10)  # 6 seconds apart

        for url in urls:
            await throttle.acquire()
            await client.post(...)
    """

    def __init__(self, requests_per_minute: int, clock: Clock | None = None):
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")

        self.requests_per_minute = requests_per_minute
        self.min_interval = 60.0 / requests_per_minute
        self.clock = clock or SystemClock()
        self.last_request_time: float | None = None
        self._lock = asyncio.Lock()

        logger.info(
            f"Throttle initialized: {requests_per_minute} req/min "
            f"(interval: {self.min_interval:.2f}s)"
        )

    async def acquire(self) -> None:
        """Wait until the next request is allowed, then claim the slot."""
        async with self._lock:
            if self.last_request_time is not None:
                elapsed = self.clock.time() - self.last_request_time
                wait_time = self.min_interval - elapsed

                if wait_time > 0:
                    logger.debug(f"Throttle: waiting {wait_time:.2f}s before next request")
                    await self.clock.sleep(wait_time)

            self.last_request_time = self.clock.time()

    def reset(self) -> None:
        """Forget the last request time."""
        self.last_request_time = None
