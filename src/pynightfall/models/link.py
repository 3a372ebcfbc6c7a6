"""Link status and connection health models."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LinkStatus(enum.StrEnum):
    """Lifecycle state of the robot link."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class ConnectionStats(BaseModel):
    """Link health counters.

    Instances are immutable; the supervisor publishes a new copy on
    every change so readers always see a consistent set of values.
    ``msgs_received``, ``msgs_sent`` and ``reconnect_attempts`` live as
    long as the link object, ``connected_since`` only as long as one
    connection.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    msg_rate: int = 0
    msgs_received: int = 0
    msgs_sent: int = 0
    last_msg_time: datetime | None = None
    connected_since: datetime | None = None
    reconnect_attempts: int = 0
    last_error: str | None = None
