"""
Scripted random, delay and clock sources for SimulationEngine.

Usage:
    from tests.simulation.sources import GatedSleep, ScriptedRandom

    # Every step succeeds
    rng = ScriptedRandom()

    # Hold every step until the test releases it
    gate = GatedSleep()
    engine = SimulationEngine(store, rng=rng, sleep=gate)
    ...
    gate.release()
"""

import asyncio
import time
from typing import Callable, List, Optional, Sequence


class ScriptedRandom:
    """Random source returning scripted values, then fixed defaults.

    ``uniform`` serves the primary (per-step success) draw and ``random`` the
    secondary failure draw. The defaults make every step succeed: a primary
    draw of 0.0 is below any positive success probability, and a secondary
    draw of 1.0 never lands inside the failure rate.
    """

    def __init__(
        self,
        primary: Sequence[float] = (),
        secondary: Sequence[float] = (),
        default_primary: float = 0.0,
        default_secondary: float = 1.0,
    ):
        self._primary = list(primary)
        self._secondary = list(secondary)
        self.default_primary = default_primary
        self.default_secondary = default_secondary
        self.calls: List[tuple] = []

    def uniform(self, a: float, b: float) -> float:
        value = self._primary.pop(0) if self._primary else self.default_primary
        self.calls.append(("uniform", value))
        return value

    def random(self) -> float:
        value = self._secondary.pop(0) if self._secondary else self.default_secondary
        self.calls.append(("random", value))
        return value


class GatedSleep:
    """Delay provider that parks each step until ``release`` is called.

    Must be created inside the running event loop.
    """

    def __init__(self, on_sleep: Optional[Callable[[float], None]] = None):
        self._permits = asyncio.Semaphore(0)
        self.on_sleep = on_sleep
        self.requested: List[float] = []
        self.waiting = 0

    async def __call__(self, seconds: float):
        self.requested.append(seconds)
        if self.on_sleep:
            self.on_sleep(seconds)
        self.waiting += 1
        try:
            await self._permits.acquire()
        finally:
            self.waiting -= 1

    def release(self, count: int = 1):
        for _ in range(count):
            self._permits.release()


class FakeClock:
    """Monotonic clock advanced only by its own ``sleep``"""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.requested: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float):
        self.requested.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


async def instant_sleep(seconds: float):
    """Yield to the loop without waiting"""
    await asyncio.sleep(0)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0, interval: float = 0.001):
    """Poll ``predicate`` on the event loop until true or time runs out"""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(interval)
