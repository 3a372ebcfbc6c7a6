from __future__ import annotations

import json
import logging
import math

import pytest

from pynightfall._client.dispatch import CommandDispatcher
from pynightfall._client.reconnect import fixed_delay
from pynightfall._client.supervisor import ConnectionSupervisor
from pynightfall.exceptions import NightfallTransportError
from pynightfall.models.commands import MoveCommand, MoveDirection, PidTuneCommand
from pynightfall.models.link import LinkStatus


def _supervisor(opener) -> ConnectionSupervisor:
    return ConnectionSupervisor(
        url="ws://robot.test:8888/",
        opener=opener,
        reconnect_policy=fixed_delay(10.0),
        on_frame=lambda _frame: None,
    )


async def _connected(opener, eventually) -> tuple[ConnectionSupervisor, CommandDispatcher]:
    supervisor = _supervisor(opener)
    supervisor.connect()
    await eventually(lambda: supervisor.status is LinkStatus.CONNECTED)
    return supervisor, CommandDispatcher(supervisor)


@pytest.mark.asyncio
async def test_send_while_disconnected_fails_fast(opener, caplog: pytest.LogCaptureFixture) -> None:
    supervisor = _supervisor(opener)
    dispatcher = CommandDispatcher(supervisor)

    with caplog.at_level(logging.WARNING, logger="pynightfall._client.dispatch"):
        result = await dispatcher.send_ui_cmd("forward")

    assert result is False
    assert supervisor.stats.msgs_sent == 0
    assert opener.urls == []
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "disconnected" in warnings[0].getMessage()


@pytest.mark.asyncio
async def test_send_while_reconnecting_fails_fast(opener, eventually) -> None:
    opener.failures.append(NightfallTransportError("refused"))
    supervisor = _supervisor(opener)
    dispatcher = CommandDispatcher(supervisor)
    supervisor.connect()
    await eventually(lambda: supervisor.reconnect_pending)

    assert await dispatcher.send("ui_cmd", {"cmd": "stop"}) is False
    assert supervisor.stats.msgs_sent == 0

    await supervisor.close()


@pytest.mark.asyncio
async def test_send_merges_payload_under_type(opener, eventually) -> None:
    supervisor, dispatcher = await _connected(opener, eventually)

    assert await dispatcher.send("ui_cmd", {"cmd": "forward", "type": "spoofed"}) is True

    sent = json.loads(opener.last_socket.sent[0])
    assert sent == {"cmd": "forward", "type": "ui_cmd"}
    assert supervisor.stats.msgs_sent == 1

    await supervisor.close()


@pytest.mark.asyncio
async def test_send_ui_cmd_keeps_explicit_cmd(opener, eventually) -> None:
    supervisor, dispatcher = await _connected(opener, eventually)

    await dispatcher.send_ui_cmd("pid_enable", {"enable": True, "cmd": "auto_on"})

    assert json.loads(opener.last_socket.sent[0]) == {"type": "ui_cmd", "cmd": "pid_enable", "enable": True}

    await supervisor.close()


@pytest.mark.asyncio
async def test_send_typed_commands(opener, eventually) -> None:
    supervisor, dispatcher = await _connected(opener, eventually)

    await dispatcher.send_command(MoveCommand(direction=MoveDirection.BACKWARD))
    await dispatcher.send_command(PidTuneCommand(kp=8.0, ki=0.1, kd=2.0))

    sent = [json.loads(text) for text in opener.last_socket.sent]
    assert sent == [
        {"type": "ui_cmd", "cmd": "backward"},
        {"type": "ui_cmd", "cmd": "pid_tune", "kP": 8.0, "kI": 0.1, "kD": 2.0},
    ]
    assert supervisor.stats.msgs_sent == 2

    await supervisor.close()


@pytest.mark.asyncio
async def test_unserializable_payload_is_rejected(opener, eventually, caplog: pytest.LogCaptureFixture) -> None:
    supervisor, dispatcher = await _connected(opener, eventually)

    with caplog.at_level(logging.WARNING, logger="pynightfall._client.dispatch"):
        assert await dispatcher.send("ui_cmd", {"cmd": "forward", "blob": object()}) is False

    assert opener.last_socket.sent == []
    assert supervisor.stats.msgs_sent == 0
    assert any("serialize" in record.getMessage() for record in caplog.records)

    await supervisor.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("gain", [math.nan, math.inf, -math.inf])
async def test_non_finite_numbers_are_rejected(
    opener, eventually, caplog: pytest.LogCaptureFixture, gain: float
) -> None:
    supervisor, dispatcher = await _connected(opener, eventually)

    with caplog.at_level(logging.WARNING, logger="pynightfall._client.dispatch"):
        assert await dispatcher.send_ui_cmd("pid_tune", {"kP": gain, "kI": 0, "kD": 0}) is False

    assert opener.last_socket.sent == []
    assert supervisor.stats.msgs_sent == 0
    assert any("serialize" in record.getMessage() for record in caplog.records)

    await supervisor.close()


@pytest.mark.asyncio
async def test_failed_write_returns_false(opener, eventually) -> None:
    supervisor, dispatcher = await _connected(opener, eventually)
    opener.last_socket.fail_send = True

    assert await dispatcher.send_ui_cmd("stop") is False
    assert supervisor.stats.msgs_sent == 0

    await supervisor.close()
