"""Outbound command dispatch.

Commands are fire-and-forget from the operator's point of view: when the
link is not open the command is dropped with a warning, never queued or
retried, so nothing can reach the robot out of order after a reconnect.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pynightfall._client.supervisor import ConnectionSupervisor
from pynightfall._constants import PACKET_UI_CMD
from pynightfall.models.commands import UiCommand
from pynightfall.models.link import LinkStatus

_logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Serialize commands and write them through the supervisor's socket."""

    def __init__(self, supervisor: ConnectionSupervisor) -> None:
        self._supervisor = supervisor

    async def send(self, command_type: str, payload: Mapping[str, Any] | None = None) -> bool:
        """Send ``{"type": command_type, **payload}`` as one frame.

        Returns ``True`` when the frame was written.  Never raises.
        """
        record = {**(payload or {}), "type": command_type}
        status = self._supervisor.status
        if status is not LinkStatus.CONNECTED:
            _logger.warning("Cannot send %s, link is %s: %s", command_type, status.value, record)
            return False

        try:
            text = json.dumps(record, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as exc:
            _logger.warning("Cannot serialize %s command: %s", command_type, exc)
            return False
        return await self._supervisor.transmit(text)

    async def send_ui_cmd(self, cmd: str, payload: Mapping[str, Any] | None = None) -> bool:
        """Send a ``ui_cmd`` frame carrying *cmd* and any extra fields."""
        return await self.send(PACKET_UI_CMD, {**(payload or {}), "cmd": cmd})

    async def send_command(self, command: UiCommand) -> bool:
        """Send a typed command through the generic ``ui_cmd`` path."""
        return await self.send_ui_cmd(command.command_name().value, command.to_payload())
