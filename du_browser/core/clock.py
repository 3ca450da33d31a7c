"""Time sources used by the cache and the request orchestrator."""

import asyncio
import time
from typing import List, Tuple


class RealClock:
    """Clock backed by the monotonic system timer."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class FakeClock:
    """Manually advanced clock for tests.

    Sleepers only wake when ``advance`` moves the clock past their deadline.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._sleepers: List[Tuple[float, asyncio.Future]] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            return
        future = asyncio.get_running_loop().create_future()
        self._sleepers.append((self._now + seconds, future))
        try:
            await future
        finally:
            self._sleepers = [s for s in self._sleepers if s[1] is not future]

    @property
    def sleeper_count(self) -> int:
        return len(self._sleepers)

    async def wait_for_sleepers(self, count: int) -> None:
        """Yield to the event loop until at least ``count`` sleepers are blocked."""
        while len(self._sleepers) < count:
            await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self._now += seconds
        for deadline, future in list(self._sleepers):
            if deadline <= self._now and not future.done():
                future.set_result(None)
