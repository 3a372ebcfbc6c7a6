"""Inbound frame decoding.

Turns one WebSocket text frame into an :class:`InboundFrame`.  Decoding
is purely structural: section contents are validated later by the
reconciler.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pynightfall._constants import PACKET_TELEMETRY
from pynightfall.exceptions import NightfallFrameError

_RAW_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class InboundFrame:
    """Decoded robot -> console frame."""

    type: str
    ts: float | None
    payload: dict[str, Any]

    @property
    def is_telemetry(self) -> bool:
        return self.type == PACKET_TELEMETRY


def _coerce_ts(value: Any) -> float | None:
    # bool is an int subclass; a boolean timestamp is meaningless.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def decode_frame(data: str | bytes) -> InboundFrame:
    """Decode a JSON object frame.

    Raises
    ------
    NightfallFrameError
        If the frame is not UTF-8, not JSON, or not a JSON object.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NightfallFrameError("Frame is not valid UTF-8", raw=repr(data[:_RAW_PREVIEW_CHARS])) from exc
    else:
        text = data

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise NightfallFrameError(f"Frame is not JSON: {exc.msg}", raw=text[:_RAW_PREVIEW_CHARS]) from exc
    if not isinstance(parsed, dict):
        raise NightfallFrameError("Frame decoded to non-object JSON", raw=text[:_RAW_PREVIEW_CHARS])

    frame_type = parsed.get("type")
    return InboundFrame(
        type=frame_type if isinstance(frame_type, str) else "",
        ts=_coerce_ts(parsed.get("ts")),
        payload=parsed,
    )
