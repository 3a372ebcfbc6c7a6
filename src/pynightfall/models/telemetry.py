"""Telemetry snapshot models.

Each top-level section of a telemetry frame maps to one model. Defaults
are the neutral values shown before the robot has reported anything.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from pynightfall.models._base import NightfallBaseModel


class SensorReadings(NightfallBaseModel):
    """Range finders (cm) and gas sensor (ppm)."""

    front_dist: float = 0.0
    rear_dist: float = 0.0
    gas: float = 0.0


class MotorSpeeds(NightfallBaseModel):
    """Per-wheel PWM duty as reported by the motor boards (0-255 observed)."""

    front_left: int = 0
    front_right: int = 0
    rear_left: int = 0
    rear_right: int = 0


class RobotState(NightfallBaseModel):
    """Mode labels.

    ``fsm`` and ``nav_state`` are firmware-defined strings and are not
    checked against a known set.
    """

    fsm: str = "INIT"
    autonomous: bool = False
    nav_state: str = "idle"


class NetworkStatus(NightfallBaseModel):
    """Liveness of the front board and the camera board, as seen by the robot."""

    front: bool = False
    camera: bool = False


class ControlReadout(NightfallBaseModel):
    """PID loop readout, passed through without interpretation."""

    out: float = 0.0
    err: float = 0.0
    sp: float = 0.0
    p: float = Field(default=0.0, alias="P")
    i: float = Field(default=0.0, alias="I")
    d: float = Field(default=0.0, alias="D")


class LoopTiming(NightfallBaseModel):
    loop_us: int = 0


class TelemetrySnapshot(NightfallBaseModel):
    """Canonical, fully populated robot state.

    Sections are replaced wholesale by the reconciler; ``last_update``
    is ``None`` until the first telemetry frame has been accepted.
    """

    sensors: SensorReadings = Field(default_factory=SensorReadings)
    motors: MotorSpeeds = Field(default_factory=MotorSpeeds)
    state: RobotState = Field(default_factory=RobotState)
    network: NetworkStatus = Field(default_factory=NetworkStatus)
    control: ControlReadout = Field(default_factory=ControlReadout)
    timing: LoopTiming = Field(default_factory=LoopTiming)
    server_clients: int = 0
    last_update: datetime | None = None
