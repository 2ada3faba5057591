"""
Clock sources.

All domain timestamps are epoch milliseconds. Services take a clock callable
so tests can drive time deterministically.
"""

import time
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], float]


def system_clock() -> float:
    """Current wall-clock time in epoch milliseconds."""
    return time.time() * 1000.0


def to_datetime(timestamp_ms: float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start_ms: float = 1_700_000_000_000.0):
        self._now = float(start_ms)

    def __call__(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        """Move time forward by ``ms`` milliseconds."""
        if ms < 0:
            raise ValueError("Cannot move a clock backwards")
        self._now += ms
        return self._now

    def set(self, now_ms: float) -> None:
        self._now = float(now_ms)
