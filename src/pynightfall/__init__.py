"""pynightfall - Async telemetry link for the Nightfall robot operator console."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pynightfall")
except PackageNotFoundError:
    __version__ = "0+local"
from pynightfall._client.reconnect import ReconnectPolicy, exponential_backoff, fixed_delay
from pynightfall.client import NightfallLink
from pynightfall.config import LinkConfig
from pynightfall.exceptions import (
    NightfallConfigError,
    NightfallError,
    NightfallFrameError,
    NightfallTransportError,
)
from pynightfall.ingestion.frames import InboundFrame
from pynightfall.models import (
    PID_PRESETS,
    AutonomyCommand,
    ConnectionStats,
    ControlReadout,
    LinkStatus,
    LoopTiming,
    MotorSpeeds,
    MoveCommand,
    MoveDirection,
    NetworkStatus,
    PidEnableCommand,
    PidTuneCommand,
    RobotState,
    SensorReadings,
    TelemetrySnapshot,
    UiCommand,
    UiCommandName,
)

__all__ = [
    "__version__",
    "PID_PRESETS",
    "AutonomyCommand",
    "ConnectionStats",
    "ControlReadout",
    "InboundFrame",
    "LinkConfig",
    "LinkStatus",
    "LoopTiming",
    "MotorSpeeds",
    "MoveCommand",
    "MoveDirection",
    "NetworkStatus",
    "NightfallConfigError",
    "NightfallError",
    "NightfallFrameError",
    "NightfallLink",
    "NightfallTransportError",
    "PidEnableCommand",
    "PidTuneCommand",
    "ReconnectPolicy",
    "RobotState",
    "SensorReadings",
    "TelemetrySnapshot",
    "UiCommand",
    "UiCommandName",
    "exponential_backoff",
    "fixed_delay",
]
