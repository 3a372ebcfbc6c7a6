"""High-level async link to a Nightfall robot."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pynightfall._client.dispatch import CommandDispatcher
from pynightfall._client.rate import RateSampler
from pynightfall._client.reconnect import ReconnectPolicy, fixed_delay
from pynightfall._client.supervisor import ConnectionSupervisor
from pynightfall._transport import AiohttpLinkOpener, LinkOpener
from pynightfall.config import LinkConfig
from pynightfall.exceptions import NightfallFrameError
from pynightfall.ingestion.frames import InboundFrame
from pynightfall.models.commands import (
    AutonomyCommand,
    MoveCommand,
    MoveDirection,
    PidEnableCommand,
    PidTuneCommand,
    UiCommand,
)
from pynightfall.models.link import ConnectionStats, LinkStatus
from pynightfall.models.telemetry import TelemetrySnapshot
from pynightfall.state.overlay import OptimisticOverlay
from pynightfall.state.sections import TelemetrySection
from pynightfall.state.store import TelemetryReconciler

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class NightfallLink:
    """Operator-side link to one robot.

    Usage::

        async with NightfallLink(LinkConfig(host="192.168.4.1")) as link:
            link.connect()
            ...
            await link.move("forward")

    Each instance owns its own socket, timers and snapshot, so several
    links can coexist in one process.  Presentation code reads
    `snapshot`, `status`, `stats` and `autonomous`; all of them are
    immutable values.
    """

    def __init__(
        self,
        config: LinkConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        opener: LinkOpener | None = None,
        reconnect_policy: ReconnectPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = _utcnow,
        on_telemetry: Callable[[TelemetrySnapshot], None] | None = None,
        on_status: Callable[[LinkStatus, ConnectionStats], None] | None = None,
        on_frame: Callable[[InboundFrame], None] | None = None,
    ) -> None:
        self._config = config if config is not None else LinkConfig()
        self._wall_clock = wall_clock
        self._on_telemetry = on_telemetry
        self._on_status = on_status
        self._on_frame_cb = on_frame

        self._owned_opener: AiohttpLinkOpener | None = None
        if opener is None:
            self._owned_opener = AiohttpLinkOpener(session, open_timeout=self._config.open_timeout)
            opener = self._owned_opener

        self._reconciler = TelemetryReconciler(clock=wall_clock)
        self._overlay = OptimisticOverlay(ttl=self._config.prediction_ttl, clock=clock)
        self._supervisor = ConnectionSupervisor(
            url=self._config.url,
            opener=opener,
            reconnect_policy=reconnect_policy or fixed_delay(self._config.reconnect_delay),
            on_frame=self._handle_frame,
            on_status=self._handle_status,
            rate_sampler=RateSampler(clock=clock),
            rate_window=self._config.rate_window,
            wall_clock=wall_clock,
            logger=logging.getLogger(f"{__name__}.supervisor"),
        )
        self._dispatcher = CommandDispatcher(self._supervisor)
        self._latency_ms: float | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> NightfallLink:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def connect(self) -> None:
        """Open the link (idempotent).  Must be called from a running loop."""
        self._supervisor.connect()

    async def close(self) -> None:
        """Cancel timers, close the socket and release the HTTP session."""
        await self._supervisor.close()
        if self._owned_opener is not None:
            await self._owned_opener.close()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def config(self) -> LinkConfig:
        return self._config

    @property
    def status(self) -> LinkStatus:
        return self._supervisor.status

    @property
    def is_connected(self) -> bool:
        return self._supervisor.status is LinkStatus.CONNECTED

    @property
    def stats(self) -> ConnectionStats:
        return self._supervisor.stats

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self._reconciler.snapshot

    @property
    def autonomous(self) -> bool:
        """Autonomy flag to display: the pending prediction, else telemetry."""
        return self._overlay.effective(self._reconciler.snapshot.state.autonomous)

    @property
    def autonomy_prediction(self) -> bool | None:
        return self._overlay.prediction

    @property
    def autonomy_stale(self) -> bool:
        """``True`` when the last autonomy request expired unconfirmed."""
        return self._overlay.stale

    @property
    def latency_ms(self) -> float | None:
        """Receive time minus the robot's ``ts`` of the last telemetry frame.

        Only meaningful when both clocks are roughly synchronized.
        """
        return self._latency_ms

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def send(self, command_type: str, payload: Mapping[str, Any] | None = None) -> bool:
        return await self._dispatcher.send(command_type, payload)

    async def send_ui_cmd(self, cmd: str, payload: Mapping[str, Any] | None = None) -> bool:
        return await self._dispatcher.send_ui_cmd(cmd, payload)

    async def send_command(self, command: UiCommand) -> bool:
        return await self._dispatcher.send_command(command)

    async def move(self, direction: MoveDirection | str) -> bool:
        return await self.send_command(MoveCommand(direction=MoveDirection(direction)))

    async def set_autonomous(self, enabled: bool) -> bool:
        """Request a mode change and show it immediately.

        The prediction is dropped again if the command could not be
        written, since the robot will never confirm it.
        """
        self._overlay.set_prediction(enabled)
        self._overlay.reconcile(self._reconciler.snapshot.state.autonomous)
        sent = await self.send_command(AutonomyCommand(enabled=enabled))
        if not sent:
            self._overlay.clear()
        return sent

    async def emergency_stop(self) -> bool:
        """Stop the motors, then drop out of autonomous mode."""
        stopped = await self.send_command(MoveCommand(direction=MoveDirection.STOP))
        manual = await self.set_autonomous(False)
        return stopped and manual

    async def tune_pid(self, kp: float, ki: float, kd: float) -> bool:
        return await self.send_command(PidTuneCommand(kp=kp, ki=ki, kd=kd))

    async def enable_pid(self, enable: bool) -> bool:
        return await self.send_command(PidEnableCommand(enable=enable))

    # ------------------------------------------------------------------
    # Supervisor callbacks
    # ------------------------------------------------------------------

    def _handle_status(self, status: LinkStatus) -> None:
        if self._on_status is not None:
            self._on_status(status, self._supervisor.stats)

    def _handle_frame(self, frame: InboundFrame) -> None:
        if not frame.is_telemetry:
            if self._on_frame_cb is not None:
                self._on_frame_cb(frame)
            return

        received_at = self._wall_clock()
        try:
            updated = self._reconciler.apply_fragment(frame.payload, received_at)
        except NightfallFrameError as exc:
            _logger.warning("Dropping invalid telemetry frame: %s", exc)
            return

        if frame.ts is not None:
            self._latency_ms = received_at.timestamp() * 1000.0 - frame.ts
        if not updated:
            return

        snapshot = self._reconciler.snapshot
        if TelemetrySection.STATE in self._reconciler.sections_in(frame.payload):
            self._overlay.reconcile(snapshot.state.autonomous)
        if self._on_telemetry is not None:
            self._on_telemetry(snapshot)
