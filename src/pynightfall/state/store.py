"""Telemetry reconciler.

This is the only component allowed to replace the canonical snapshot.
Merge semantics are section-level: a fragment that names a section
replaces that section wholesale, sections it does not name keep their
last-known value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from pynightfall.exceptions import NightfallFrameError
from pynightfall.models.telemetry import TelemetrySnapshot
from pynightfall.state.sections import SECTION_ADAPTERS, TelemetrySection

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TelemetryReconciler:
    """Merge partial telemetry fragments into an always-complete snapshot.

    The snapshot is an immutable model; every accepted fragment produces
    a new object, so references handed out earlier never change.
    """

    def __init__(
        self,
        *,
        initial: TelemetrySnapshot | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._snapshot = initial if initial is not None else TelemetrySnapshot()
        self._clock = clock

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self._snapshot

    def apply_fragment(self, fragment: Mapping[str, Any], received_at: datetime | None = None) -> bool:
        """Apply a partial update keyed by section name.

        Returns ``True`` when at least one recognized section was applied
        (and ``last_update`` was stamped), ``False`` for a no-op fragment.

        Raises
        ------
        NightfallFrameError
            If a recognized section fails validation.  Nothing from the
            fragment is applied in that case.
        """
        update: dict[str, Any] = {}
        for section, adapter in SECTION_ADAPTERS.items():
            value = fragment.get(section.value)
            if value is None:
                continue
            try:
                update[section.value] = adapter.validate_python(value)
            except ValidationError as exc:
                raise NightfallFrameError(
                    f"Invalid telemetry section {section.value!r}: {exc.error_count()} error(s)",
                    raw=repr(value)[:200],
                ) from exc

        if not update:
            _logger.debug("Telemetry fragment without recognized sections ignored keys=%s", sorted(fragment))
            return False

        update["last_update"] = received_at if received_at is not None else self._clock()
        self._snapshot = self._snapshot.model_copy(update=update)
        return True

    def sections_in(self, fragment: Mapping[str, Any]) -> set[TelemetrySection]:
        """Recognized, non-null sections named by *fragment*."""
        return {section for section in TelemetrySection if fragment.get(section.value) is not None}
