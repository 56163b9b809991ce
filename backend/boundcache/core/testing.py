"""
Testing helpers.

Deterministic clock for exercising expiry without sleeping.
"""

import threading


class ManualClock:
    """
    Clock whose time only moves when told to.

    Instances are callables, so they can be passed wherever a cache expects
    a clock.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self._now

    @property
    def now(self) -> float:
        return self()

    def advance(self, seconds: float) -> float:
        """Move time forward and return the new reading."""
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, value: float) -> None:
        with self._lock:
            if value < self._now:
                raise ValueError("Clock cannot move backwards")
            self._now = float(value)
