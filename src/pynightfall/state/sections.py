"""Top-level telemetry sections and the model each one validates into."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import TypeAdapter

from pynightfall.models.telemetry import (
    ControlReadout,
    LoopTiming,
    MotorSpeeds,
    NetworkStatus,
    RobotState,
    SensorReadings,
)


class TelemetrySection(StrEnum):
    SENSORS = "sensors"
    MOTORS = "motors"
    STATE = "state"
    NETWORK = "network"
    CONTROL = "control"
    TIMING = "timing"
    SERVER_CLIENTS = "server_clients"


SECTION_ADAPTERS: dict[TelemetrySection, TypeAdapter[Any]] = {
    TelemetrySection.SENSORS: TypeAdapter(SensorReadings),
    TelemetrySection.MOTORS: TypeAdapter(MotorSpeeds),
    TelemetrySection.STATE: TypeAdapter(RobotState),
    TelemetrySection.NETWORK: TypeAdapter(NetworkStatus),
    TelemetrySection.CONTROL: TypeAdapter(ControlReadout),
    TelemetrySection.TIMING: TypeAdapter(LoopTiming),
    TelemetrySection.SERVER_CLIENTS: TypeAdapter(int),
}
