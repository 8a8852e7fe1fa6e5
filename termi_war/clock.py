"""Time source for the shell.

Everything time-dependent (boot reveals, the menu debounce, the cursor
blink) reads the clock through these helpers, so a test can substitute any
object with a ``now()`` method.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Seconds on a monotonic scale; only differences are meaningful."""


class RealClock:
    def now(self) -> float:
        return time.monotonic()


def now_ms(clock: Clock) -> int:
    return int(clock.now() * 1000.0)


def elapsed_s(clock: Clock, since_s: float) -> float:
    """Seconds since the anchor ``since_s``, never negative."""
    return max(0.0, clock.now() - since_s)


def blink_on(clock: Clock, half_period_ms: int) -> bool:
    # On for the first half of each cycle, starting at t=0.
    return (now_ms(clock) // max(1, half_period_ms)) % 2 == 0
