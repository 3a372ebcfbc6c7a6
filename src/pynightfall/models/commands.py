"""Operator command models.

The dispatcher sends any ``cmd`` string with any payload.  These models
are the typed layer in front of it: each known command is one class,
so a misspelled command or a missing gain fails at construction time
instead of silently doing nothing on the robot.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class UiCommandName(enum.StrEnum):
    """``cmd`` values understood by the robot firmware."""

    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"
    STOP = "stop"
    AUTO_ON = "auto_on"
    AUTO_OFF = "auto_off"
    PID_TUNE = "pid_tune"
    PID_ENABLE = "pid_enable"


class MoveDirection(enum.StrEnum):
    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"
    STOP = "stop"


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


class UiCommand(BaseModel):
    """Base class for typed ``ui_cmd`` commands."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        populate_by_name=True,
    )

    def command_name(self) -> UiCommandName:
        raise NotImplementedError

    def to_payload(self) -> dict[str, Any]:
        """Return the extra fields sent next to ``cmd``."""
        return self.model_dump(by_alias=True, exclude_none=True)


class MoveCommand(UiCommand):
    """Manual drive command (robot keeps moving until ``stop``)."""

    direction: MoveDirection

    def command_name(self) -> UiCommandName:
        return UiCommandName(self.direction.value)

    def to_payload(self) -> dict[str, Any]:
        return {}


class AutonomyCommand(UiCommand):
    """Switch between autonomous navigation and manual control."""

    enabled: bool

    def command_name(self) -> UiCommandName:
        return UiCommandName.AUTO_ON if self.enabled else UiCommandName.AUTO_OFF

    def to_payload(self) -> dict[str, Any]:
        return {}


class PidTuneCommand(UiCommand):
    """New gains for the robot's heading PID loop."""

    kp: float = Field(..., ge=0.0, allow_inf_nan=False, alias="kP")
    ki: float = Field(..., ge=0.0, allow_inf_nan=False, alias="kI")
    kd: float = Field(..., ge=0.0, allow_inf_nan=False, alias="kD")

    def command_name(self) -> UiCommandName:
        return UiCommandName.PID_TUNE


class PidEnableCommand(UiCommand):
    enable: bool

    def command_name(self) -> UiCommandName:
        return UiCommandName.PID_ENABLE


#: Gain presets offered by the operator console.
PID_PRESETS: dict[str, PidTuneCommand] = {
    "conservative": PidTuneCommand(kp=2.0, ki=0.0, kd=0.5),
    "balanced": PidTuneCommand(kp=4.0, ki=0.0, kd=1.0),
    "aggressive": PidTuneCommand(kp=8.0, ki=0.1, kd=2.0),
}
