"""Inbound message rate sampling."""

from __future__ import annotations

import time
from collections.abc import Callable


class RateSampler:
    """Count frames and turn the count into messages/second once per window.

    The divisor is the time actually elapsed since the window started,
    so a sampling timer that fires late still yields a correct rate.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._count = 0
        self._window_start = clock()
        self._rate = 0

    @property
    def rate(self) -> int:
        """Most recently published rate."""
        return self._rate

    @property
    def pending(self) -> int:
        """Frames counted in the current window."""
        return self._count

    def record(self) -> None:
        self._count += 1

    def reset(self) -> None:
        """Start a fresh window now, discarding any pending count."""
        self._count = 0
        self._window_start = self._clock()

    def sample(self) -> int | None:
        """Close the current window.

        Returns the new rate, or ``None`` when no time has elapsed (the
        window is then left open).
        """
        now = self._clock()
        elapsed = now - self._window_start
        if elapsed <= 0:
            return None
        self._rate = round(self._count / elapsed)
        self._count = 0
        self._window_start = now
        return self._rate
