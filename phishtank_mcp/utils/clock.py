"""Time source used by the cache, the throttle and date statistics."""

import asyncio
import time
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol for wall-clock time and asynchronous waits."""

    def time(self) -> float:
        """Current time as seconds since the epoch."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for the given number of seconds."""
        ...


class SystemClock:
    """Clock backed by the system wall clock and asyncio.sleep."""

    def time(self) -> float:
        return time.time()

    async def sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)


def utc_now(clock: Clock) -> datetime:
    """Current time of the clock as an aware UTC datetime."""
    return datetime.fromtimestamp(clock.time(), UTC)
