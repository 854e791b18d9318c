"""Transition gate: holds input back while a visual effect plays."""

import math
import time
from typing import Callable


class TransitionGate:
    """Tracks whether a transition effect is currently playing.

    The gate is cooperative. It never sleeps or blocks on its own; the event
    loop asks :meth:`is_playing` once per render tick and, while it answers
    True, keeps rendering instead of reading input. The gate falls back to
    idle by itself once the effect's duration has elapsed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._start: float | None = None
        self._duration: float = 0.0

    def play(self, duration: float) -> None:
        """Start an effect. A non-positive or non-finite duration leaves the gate idle."""
        if not math.isfinite(duration) or duration <= 0:
            self._start = None
            return
        self._start = self._clock()
        self._duration = duration

    def is_playing(self) -> bool:
        if self._start is None:
            return False
        if self._clock() - self._start >= self._duration:
            self._start = None
        return self._start is not None

    def progress(self) -> float | None:
        """Fraction of the effect completed, or None when idle."""
        if not self.is_playing():
            return None
        elapsed = self._clock() - self._start
        return min(1.0, max(0.0, elapsed / self._duration))

    def __repr__(self) -> str:
        if self._start is None:
            return "TransitionGate(idle)"
        return f"TransitionGate(playing, start={self._start:.3f}, duration={self._duration:.3f})"
