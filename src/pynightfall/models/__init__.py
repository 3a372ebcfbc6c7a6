"""Data models for Nightfall telemetry, link health and operator commands."""

from pynightfall.models._base import NightfallBaseModel
from pynightfall.models.commands import (
    PID_PRESETS,
    AutonomyCommand,
    MoveCommand,
    MoveDirection,
    PidEnableCommand,
    PidTuneCommand,
    UiCommand,
    UiCommandName,
)
from pynightfall.models.link import ConnectionStats, LinkStatus
from pynightfall.models.telemetry import (
    ControlReadout,
    LoopTiming,
    MotorSpeeds,
    NetworkStatus,
    RobotState,
    SensorReadings,
    TelemetrySnapshot,
)

__all__ = [
    "PID_PRESETS",
    "AutonomyCommand",
    "ConnectionStats",
    "ControlReadout",
    "LinkStatus",
    "LoopTiming",
    "MotorSpeeds",
    "MoveCommand",
    "MoveDirection",
    "NetworkStatus",
    "NightfallBaseModel",
    "PidEnableCommand",
    "PidTuneCommand",
    "RobotState",
    "SensorReadings",
    "TelemetrySnapshot",
    "UiCommand",
    "UiCommandName",
]
