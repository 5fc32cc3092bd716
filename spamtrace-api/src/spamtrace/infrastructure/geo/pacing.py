from __future__ import annotations

import time
from typing import Callable, Optional


class MinIntervalPacer:
    """Guarantees at least `min_interval` seconds between consecutive calls.

    The first call never waits. Clock and sleep are injectable so tests can
    drive time by hand.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    def wait(self) -> float:
        """Block until the next call is allowed, then record it. Returns seconds slept."""
        slept = 0.0
        if self._last_call is not None:
            remaining = self.min_interval - (self._clock() - self._last_call)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last_call = self._clock()
        return slept
