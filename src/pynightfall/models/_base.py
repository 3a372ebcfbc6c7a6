"""Base model for Nightfall telemetry sections and link records.

Every section model inherits from :class:`NightfallBaseModel` which
provides:

* ``frozen=True`` so snapshots handed to presentation code can never be
  mutated behind the link's back.
* ``extra="ignore"`` so fields added by newer robot firmware are
  accepted without error.
* A ``model_validator(mode="before")`` that drops ``null`` values so the
  field default is used instead.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class NightfallBaseModel(BaseModel):
    """Base for robot telemetry models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_null_values(cls, values: Any) -> Any:
        """Remove ``None`` entries so missing readings fall back to defaults."""
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None}
