"""Global pacing gate: minimum interval between successive search acquisitions."""

import random
import threading
import time
from typing import Callable, Optional


class PacingGate:
    """
    Enforce a minimum interval (plus random jitter) between acquisitions
    across all in-flight requests.

    The next slot is reserved under the lock and the caller sleeps outside
    it, so concurrent callers queue up one interval apart.
    """

    def __init__(
        self,
        min_interval: float = 3.0,
        jitter: float = 1.0,
        rng: Optional[random.Random] = None,
        sleep_fn: Optional[Callable[[float], None]] = None,
        clock_fn: Optional[Callable[[], float]] = None,
    ):
        if min_interval < 0 or jitter < 0:
            raise ValueError("min_interval and jitter must be >= 0")
        self.min_interval = min_interval
        self.jitter = jitter
        self._rng = rng or random.Random()
        self._sleep = sleep_fn or time.sleep
        self._clock = clock_fn or time.monotonic
        self._lock = threading.Lock()
        self._next_allowed: Optional[float] = None

    def wait(self) -> float:
        """Block until the caller may acquire. Returns the seconds slept."""
        with self._lock:
            now = self._clock()
            delay = 0.0
            if self._next_allowed is not None and now < self._next_allowed:
                delay = self._next_allowed - now + self._rng.uniform(0, self.jitter)
            self._next_allowed = now + delay + self.min_interval

        if delay > 0:
            self._sleep(delay)
        return delay
