"""Optimistic overlay for the operator-controlled autonomy flag.

The console shows the operator's requested mode immediately and keeps
showing it until telemetry reports the same value.  A prediction that is
never confirmed (command lost, robot refused) expires after ``ttl``
seconds and the confirmed value is shown again.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

_logger = logging.getLogger(__name__)


class OptimisticOverlay:
    """Single-slot predicted value for ``state.autonomous``."""

    def __init__(
        self,
        *,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        # ttl <= 0 or None: sticky, cleared only by confirmation.
        self._ttl = ttl if ttl is not None and ttl > 0 else None
        self._clock = clock
        self._value: bool | None = None
        self._set_at: float | None = None
        self._stale = False
        self._expired: bool | None = None

    @property
    def prediction(self) -> bool | None:
        """Current prediction, or ``None`` once confirmed or expired."""
        self._expire_if_due()
        return self._value

    @property
    def stale(self) -> bool:
        """``True`` after a prediction expired and telemetry has not since matched it."""
        self._expire_if_due()
        return self._stale

    def set_prediction(self, value: bool) -> None:
        """Set (or overwrite) the predicted value."""
        self._value = bool(value)
        self._set_at = self._clock()
        self._stale = False
        self._expired = None

    def effective(self, confirmed: bool) -> bool:
        """Value to display: the prediction when present, else *confirmed*."""
        prediction = self.prediction
        return prediction if prediction is not None else confirmed

    def reconcile(self, confirmed: bool) -> bool:
        """Clear the prediction if *confirmed* matches it.

        Returns ``True`` when a pending prediction was cleared.
        """
        self._expire_if_due()
        if self._value is None:
            if self._stale and self._expired == confirmed:
                _logger.debug("Expired autonomy prediction confirmed late value=%s", confirmed)
                self._stale = False
                self._expired = None
            return False
        if self._value != confirmed:
            return False
        _logger.debug("Autonomy prediction confirmed value=%s", confirmed)
        self.clear()
        return True

    def clear(self) -> None:
        self._value = None
        self._set_at = None
        self._stale = False
        self._expired = None

    def _expire_if_due(self) -> None:
        if self._value is None or self._ttl is None or self._set_at is None:
            return
        age = self._clock() - self._set_at
        if age < self._ttl:
            return
        _logger.warning(
            "Autonomy prediction %s not confirmed after %.1fs, reverting to telemetry",
            self._value,
            age,
        )
        self._expired = self._value
        self._value = None
        self._set_at = None
        self._stale = True
