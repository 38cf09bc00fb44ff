# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Time and identifier sources injected into the registry service.
Tests swap these for fixed values.
"""

import itertools
import threading
import time
from typing import Callable, Iterator

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in nanoseconds since the Unix epoch."""
    return time.time_ns()


class FixedClock:
    """Clock that returns a fixed instant, advanced manually."""

    def __init__(self, start_ns: int = 0, step_ns: int = 0) -> None:
        self._now = start_ns
        self._step = step_ns

    def __call__(self) -> int:
        now = self._now
        self._now += self._step
        return now

    def advance(self, ns: int) -> None:
        self._now += ns


class SequentialIdGenerator:
    """Monotonically increasing numeric group ids, starting at ``start``."""

    def __init__(self, start: int = 1) -> None:
        self._lock = threading.Lock()
        self._counter: Iterator[int] = itertools.count(start)
        self._last = start - 1

    def __call__(self) -> int:
        with self._lock:
            self._last = next(self._counter)
            return self._last

    @property
    def last(self) -> int:
        return self._last

    def reset(self, start: int = 1) -> None:
        """Restart numbering, e.g. after reloading ids from a durable store."""
        with self._lock:
            self._counter = itertools.count(start)
            self._last = start - 1
