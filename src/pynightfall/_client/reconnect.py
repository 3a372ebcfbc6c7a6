"""Reconnect delay policies.

A policy is a pure function ``attempt -> delay_seconds`` where ``attempt``
is the 1-based number of the reconnect attempt about to be scheduled.
The supervisor's state machine never changes with the policy; only the
timer length does.
"""

from __future__ import annotations

from collections.abc import Callable

ReconnectPolicy = Callable[[int], float]


def fixed_delay(delay: float) -> ReconnectPolicy:
    """Always wait *delay* seconds."""
    if delay < 0:
        raise ValueError(f"delay must be >= 0, got {delay}")

    def policy(_attempt: int) -> float:
        return delay

    return policy


def exponential_backoff(
    base: float,
    *,
    factor: float = 2.0,
    max_delay: float = 30.0,
) -> ReconnectPolicy:
    """Wait ``base * factor ** (attempt - 1)`` seconds, capped at *max_delay*."""
    if base < 0 or max_delay < 0:
        raise ValueError("base and max_delay must be >= 0")
    if factor < 1.0:
        raise ValueError(f"factor must be >= 1.0, got {factor}")

    def policy(attempt: int) -> float:
        exponent = max(0, attempt - 1)
        try:
            delay = base * factor**exponent
        except OverflowError:
            return max_delay
        return min(delay, max_delay)

    return policy
