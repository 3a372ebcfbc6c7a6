"""Link configuration for pynightfall."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pynightfall._constants import (
    DEFAULT_HOST,
    DEFAULT_PATH,
    DEFAULT_PORT,
    OPEN_TIMEOUT_S,
    PREDICTION_TTL_S,
    RATE_WINDOW_S,
    RECONNECT_DELAY_S,
)
from pynightfall.exceptions import NightfallConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class LinkConfig:
    """Telemetry link configuration.

    Parameters
    ----------
    host : str
        Robot (or relay) host name or IP address.
    port : int
        WebSocket port.
    path : str
        WebSocket request path.
    secure : bool
        Use ``wss://`` instead of ``ws://``.
    reconnect_delay : float
        Seconds between a detected closure and the next connection
        attempt when the default fixed reconnect policy is used.
    rate_window : float
        Sampling window of the inbound message rate, in seconds.
    prediction_ttl : float or None
        Seconds an unconfirmed autonomy prediction is shown before it
        reverts to the confirmed value.  ``None`` or ``<= 0`` keeps the
        prediction until telemetry confirms it.
    open_timeout : float
        Seconds allowed for the WebSocket handshake.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    path: str = DEFAULT_PATH
    secure: bool = False
    reconnect_delay: float = RECONNECT_DELAY_S
    rate_window: float = RATE_WINDOW_S
    prediction_ttl: float | None = PREDICTION_TTL_S
    open_timeout: float = OPEN_TIMEOUT_S

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise NightfallConfigError("host must be non-empty")
        if not 0 < int(self.port) < 65536:
            raise NightfallConfigError(f"port must be between 1 and 65535, got {self.port}")
        if self.reconnect_delay < 0:
            raise NightfallConfigError(f"reconnect_delay must be >= 0, got {self.reconnect_delay}")
        if self.rate_window <= 0:
            raise NightfallConfigError(f"rate_window must be > 0, got {self.rate_window}")
        if self.open_timeout <= 0:
            raise NightfallConfigError(f"open_timeout must be > 0, got {self.open_timeout}")
        if not self.path.startswith("/"):
            object.__setattr__(self, "path", f"/{self.path}")

    @property
    def url(self) -> str:
        """WebSocket URL of the robot endpoint."""
        scheme = "wss" if self.secure else "ws"
        return f"{scheme}://{self.host}:{self.port}{self.path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> LinkConfig:
        """Create configuration from environment variables.

        Reads optional ``NIGHTFALL_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LinkConfig
            Populated configuration.

        Raises
        ------
        NightfallConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        host = env.get("NIGHTFALL_HOST")
        if host is not None:
            config_kwargs["host"] = host
        path = env.get("NIGHTFALL_PATH")
        if path is not None:
            config_kwargs["path"] = path

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "NIGHTFALL_PORT": ("port", int),
            "NIGHTFALL_RECONNECT_DELAY": ("reconnect_delay", float),
            "NIGHTFALL_RATE_WINDOW": ("rate_window", float),
            "NIGHTFALL_PREDICTION_TTL": ("prediction_ttl", float),
            "NIGHTFALL_OPEN_TIMEOUT": ("open_timeout", float),
        }
        for env_key, (field_name, caster) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = caster(val)
            except ValueError as exc:
                raise NightfallConfigError(f"{env_key} is not a valid {caster.__name__}: {val!r}") from exc

        if "secure" not in overrides:
            config_kwargs["secure"] = _env_bool(env.get("NIGHTFALL_SECURE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
