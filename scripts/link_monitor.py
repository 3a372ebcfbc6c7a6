#!/usr/bin/env python3
"""Watch a Nightfall robot link from the terminal.

Connects to the robot, logs every link status change and prints a one-line
summary for each telemetry update.  Runs until Ctrl+C or until
``--duration`` seconds have elapsed.

Connection settings come from ``NIGHTFALL_*`` environment variables;
command-line flags take precedence.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import Any

from pynightfall import (
    ConnectionStats,
    LinkConfig,
    LinkStatus,
    NightfallConfigError,
    NightfallLink,
    TelemetrySnapshot,
)

_logger = logging.getLogger("link_monitor")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Monitor a Nightfall robot telemetry link")
    parser.add_argument("--host", default=None, help="Robot host (default: NIGHTFALL_HOST or 192.168.4.1)")
    parser.add_argument("--port", type=int, default=None, help="WebSocket port (default: NIGHTFALL_PORT or 8888)")
    parser.add_argument("--path", default=None, help="WebSocket path (default: NIGHTFALL_PATH or /)")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _format_snapshot(snapshot: TelemetrySnapshot, stats: ConnectionStats, latency_ms: float | None) -> str:
    state = snapshot.state
    sensors = snapshot.sensors
    motors = snapshot.motors
    latency = f"{latency_ms:.0f}ms" if latency_ms is not None else "-"
    return (
        f"fsm={state.fsm} nav={state.nav_state} auto={'on' if state.autonomous else 'off'} "
        f"front={sensors.front_dist:.1f}cm rear={sensors.rear_dist:.1f}cm gas={sensors.gas:.0f} "
        f"motors={motors.front_left}/{motors.front_right}/{motors.rear_left}/{motors.rear_right} "
        f"loop={snapshot.timing.loop_us}us rate={stats.msg_rate}/s latency={latency}"
    )


async def _run(config: LinkConfig, duration: float | None) -> int:
    stop = asyncio.Event()
    link: NightfallLink | None = None

    def on_status(status: LinkStatus, stats: ConnectionStats) -> None:
        if status is LinkStatus.ERROR:
            _logger.warning("Link %s (%s)", status.value, stats.last_error)
        else:
            _logger.info("Link %s (reconnect attempts=%d)", status.value, stats.reconnect_attempts)

    def on_telemetry(snapshot: TelemetrySnapshot) -> None:
        assert link is not None  # noqa: S101
        print(_format_snapshot(snapshot, link.stats, link.latency_ms))

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on Windows event loops.
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with NightfallLink(config, on_status=on_status, on_telemetry=on_telemetry) as link:
        _logger.info("Connecting to %s", config.url)
        link.connect()
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout=duration)
        stats = link.stats

    _logger.info(
        "Done: received=%d sent=%d reconnects=%d",
        stats.msgs_received,
        stats.msgs_sent,
        stats.reconnect_attempts,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {}
    for field_name in ("host", "port", "path"):
        value = getattr(args, field_name)
        if value is not None:
            overrides[field_name] = value
    try:
        config = LinkConfig.from_env(**overrides)
    except NightfallConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    try:
        return asyncio.run(_run(config, args.duration))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
