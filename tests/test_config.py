from __future__ import annotations

import pytest

from pynightfall.config import LinkConfig
from pynightfall.exceptions import NightfallConfigError


def test_defaults_match_robot_access_point() -> None:
    config = LinkConfig()

    assert config.url == "ws://192.168.4.1:8888/"
    assert config.reconnect_delay == 2.5
    assert config.rate_window == 1.0
    assert config.prediction_ttl == 5.0


def test_url_uses_wss_and_normalizes_path() -> None:
    config = LinkConfig(host="robot.local", port=443, path="telemetry", secure=True)

    assert config.path == "/telemetry"
    assert config.url == "wss://robot.local:443/telemetry"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"host": "  "},
        {"port": 0},
        {"port": 70000},
        {"reconnect_delay": -1.0},
        {"rate_window": 0.0},
        {"open_timeout": 0.0},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(NightfallConfigError):
        LinkConfig(**kwargs)  # type: ignore[arg-type]


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NIGHTFALL_HOST", "10.0.0.7")
    monkeypatch.setenv("NIGHTFALL_PORT", "9000")
    monkeypatch.setenv("NIGHTFALL_RECONNECT_DELAY", "0.5")
    monkeypatch.setenv("NIGHTFALL_PREDICTION_TTL", "0")
    monkeypatch.setenv("NIGHTFALL_SECURE", "yes")

    config = LinkConfig.from_env()

    assert config.host == "10.0.0.7"
    assert config.port == 9000
    assert config.reconnect_delay == 0.5
    assert config.prediction_ttl == 0.0
    assert config.url == "wss://10.0.0.7:9000/"


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NIGHTFALL_HOST", "10.0.0.7")
    monkeypatch.setenv("NIGHTFALL_PORT", "not-a-number")

    config = LinkConfig.from_env(host="127.0.0.1", port=8888)

    assert config.host == "127.0.0.1"
    assert config.port == 8888


def test_from_env_bad_number_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NIGHTFALL_RATE_WINDOW", "fast")

    with pytest.raises(NightfallConfigError, match="NIGHTFALL_RATE_WINDOW"):
        LinkConfig.from_env()
