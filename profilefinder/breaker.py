"""
Circuit breaker for search providers.

After repeated acquisition failures a provider is skipped for a recovery
window instead of burning pacing slots and quota on a provider that is down
or blocking us.
"""

import threading
import time
from typing import Callable, Optional, Type

from .errors import AcquisitionError, AcquisitionFailure


class CircuitOpenError(AcquisitionFailure):
    """Raised instead of calling a provider whose circuit is OPEN."""


class CircuitBreaker:
    """
    Tracks consecutive acquisition failures for one provider.

    CLOSED lets fetches through. OPEN rejects them until ``recovery_timeout``
    seconds have passed since the last failure, then a single HALF_OPEN trial
    fetch decides whether the provider is usable again. State changes happen
    under a lock; the breaker is shared by the server's request threads.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 300,
        expected_exception: Type[Exception] = AcquisitionError,
        clock_fn: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            failure_threshold: Consecutive acquisition errors that open the circuit
            recovery_timeout: Seconds an open circuit rejects fetches
            expected_exception: Errors that count against the provider
            clock_fn: Monotonic clock, injectable for tests
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self._clock = clock_fn or time.monotonic
        self._lock = threading.Lock()

        self.state = self.CLOSED
        self.failure_count = 0
        self.opened_at: Optional[float] = None

    def call(self, fetch: Callable, *args, **kwargs):
        """
        Run ``fetch`` unless the provider is being skipped.

        Raises:
            CircuitOpenError: The circuit is OPEN and still cooling down, or
                another thread's trial fetch is in flight
            expected_exception: Whatever ``fetch`` raised, after counting it
        """
        with self._lock:
            self._admit()

        try:
            page = fetch(*args, **kwargs)
        except self.expected_exception:
            with self._lock:
                self._trip()
            raise
        except Exception:
            # uncounted errors still end a trial fetch
            with self._lock:
                if self.state == self.HALF_OPEN:
                    self.state = self.OPEN
            raise
        with self._lock:
            self._close()
        return page

    def _admit(self):
        if self.state == self.HALF_OPEN:
            raise CircuitOpenError("Circuit breaker is OPEN. Provider trial fetch in progress")
        if self.state == self.OPEN:
            remaining = self._cooldown_left()
            if remaining > 0:
                raise CircuitOpenError(
                    f"Circuit breaker is OPEN. Provider skipped for another {remaining:.0f}s"
                )
            self.state = self.HALF_OPEN

    def _cooldown_left(self) -> float:
        if self.opened_at is None:
            return 0.0
        return self.recovery_timeout - (self._clock() - self.opened_at)

    def _trip(self):
        self.failure_count += 1
        self.opened_at = self._clock()
        # a failed trial fetch reopens at once
        if self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = self.OPEN

    def _close(self):
        self.state = self.CLOSED
        self.failure_count = 0
        self.opened_at = None

    def reset(self):
        """Close the circuit and forget past failures."""
        with self._lock:
            self._close()
