"""Connection supervisor for the robot link.

Owns:
- the socket and its reader task
- the link status state machine and connection stats
- the single reconnect timer
- the message-rate sampling task
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pynightfall._client.rate import RateSampler
from pynightfall._client.reconnect import ReconnectPolicy
from pynightfall._constants import ERROR_CONNECTION_FAILED, RATE_WINDOW_S
from pynightfall._transport import LinkOpener, LinkSocket
from pynightfall.exceptions import NightfallError, NightfallFrameError, NightfallTransportError
from pynightfall.ingestion.frames import InboundFrame, decode_frame
from pynightfall.models.link import ConnectionStats, LinkStatus


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConnectionSupervisor:
    """Drive one link through connect, receive, fail and reconnect.

    All methods must be called from the event loop that ran `connect()`.
    State changes happen synchronously between awaits, so the status and
    stats seen by callbacks are always consistent.
    """

    def __init__(
        self,
        *,
        url: str,
        opener: LinkOpener,
        reconnect_policy: ReconnectPolicy,
        on_frame: Callable[[InboundFrame], None],
        on_status: Callable[[LinkStatus], None] | None = None,
        rate_sampler: RateSampler | None = None,
        rate_window: float = RATE_WINDOW_S,
        wall_clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._url = url
        self._opener = opener
        self._reconnect_policy = reconnect_policy
        self._on_frame = on_frame
        self._on_status = on_status
        self._sampler = rate_sampler if rate_sampler is not None else RateSampler()
        self._rate_window = rate_window
        self._wall_clock = wall_clock
        self._logger = logger or logging.getLogger(__name__)

        self._loop: asyncio.AbstractEventLoop | None = None
        self._status = LinkStatus.DISCONNECTED
        self._stats = ConnectionStats()
        self._socket: LinkSocket | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._rate_task: asyncio.Task[None] | None = None
        self._reconnect_handle: asyncio.TimerHandle | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def url(self) -> str:
        return self._url

    @property
    def status(self) -> LinkStatus:
        return self._status

    @property
    def stats(self) -> ConnectionStats:
        return self._stats

    @property
    def reconnect_pending(self) -> bool:
        """Whether a reconnect timer is currently armed."""
        return self._reconnect_handle is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Start a connection attempt unless one is open, running or scheduled."""
        if self._closed:
            raise NightfallError("Link is closed; create a new link to reconnect")
        self._loop = asyncio.get_running_loop()
        self._ensure_rate_task()

        if self._attempt_active():
            self._logger.debug("Connect ignored, link is %s", self._status.value)
            return
        if self._reconnect_handle is not None:
            self._logger.debug("Connect ignored, reconnect already scheduled")
            return
        self._start_attempt()

    async def close(self) -> None:
        """Tear the link down without triggering a reconnect."""
        if self._closed:
            return
        self._closed = True

        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        tasks = [task for task in (self._reader_task, self._rate_task) if task is not None]
        self._reader_task = None
        self._rate_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        socket = self._socket
        self._socket = None
        if socket is not None:
            await self._close_socket(socket)

        self._update_stats(connected_since=None)
        self._set_status(LinkStatus.DISCONNECTED)
        self._logger.debug("Link to %s closed", self._url)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def transmit(self, text: str) -> bool:
        """Write one text frame on the open socket.

        Returns ``False`` when no socket is open or the write failed; the
        reader task notices a broken socket and drives the reconnect.
        """
        socket = self._socket
        if self._status is not LinkStatus.CONNECTED or socket is None:
            return False
        try:
            await socket.send_text(text)
        except NightfallTransportError as exc:
            self._logger.warning("Send on %s failed: %s", self._url, exc)
            return False
        self._update_stats(msgs_sent=self._stats.msgs_sent + 1)
        return True

    # ------------------------------------------------------------------
    # Reader
    # ------------------------------------------------------------------

    def _attempt_active(self) -> bool:
        return self._reader_task is not None and not self._reader_task.done()

    def _start_attempt(self) -> None:
        assert self._loop is not None  # noqa: S101
        self._set_status(LinkStatus.CONNECTING)
        self._reader_task = self._loop.create_task(self._run(), name=f"nightfall-link {self._url}")

    async def _run(self) -> None:
        self._logger.debug("Connecting to %s", self._url)
        try:
            socket = await self._opener.open(self._url)
        except Exception as exc:
            self._handle_error(exc)
            self._handle_closed()
            return

        self._socket = socket
        self._handle_open()
        try:
            async for data in socket.frames():
                self._handle_data(data)
        except Exception as exc:
            self._handle_error(exc)
        finally:
            self._socket = None
            await self._close_socket(socket)
        self._handle_closed()

    async def _close_socket(self, socket: LinkSocket) -> None:
        try:
            await socket.close()
        except Exception:
            self._logger.debug("Socket close failed", exc_info=True)

    # ------------------------------------------------------------------
    # State machine transitions
    # ------------------------------------------------------------------

    def _handle_open(self) -> None:
        self._update_stats(
            connected_since=self._wall_clock(),
            reconnect_attempts=0,
            last_error=None,
        )
        self._set_status(LinkStatus.CONNECTED)
        self._logger.info("Link to %s connected", self._url)

    def _handle_error(self, exc: BaseException) -> None:
        self._logger.warning("Link to %s failed: %s", self._url, exc)
        self._update_stats(last_error=ERROR_CONNECTION_FAILED)
        self._set_status(LinkStatus.ERROR)

    def _handle_closed(self) -> None:
        if self._closed:
            return
        self._update_stats(connected_since=None)
        self._set_status(LinkStatus.DISCONNECTED)
        self._logger.info("Link to %s disconnected", self._url)
        self._schedule_reconnect()

    def _handle_data(self, data: str | bytes) -> None:
        self._sampler.record()
        try:
            frame = decode_frame(data)
        except NightfallFrameError as exc:
            self._logger.warning("Dropping malformed frame from %s: %s", self._url, exc)
            return
        self._update_stats(
            msgs_received=self._stats.msgs_received + 1,
            last_msg_time=self._wall_clock(),
        )
        try:
            self._on_frame(frame)
        except Exception:
            self._logger.warning("Frame handler failed type=%s", frame.type, exc_info=True)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _schedule_reconnect(self) -> None:
        if self._closed or self._reconnect_handle is not None:
            return
        assert self._loop is not None  # noqa: S101
        attempt = self._stats.reconnect_attempts + 1
        delay = self._reconnect_policy(attempt)
        self._logger.debug("Reconnect attempt %d scheduled in %.2fs", attempt, delay)
        self._reconnect_handle = self._loop.call_later(delay, self._reconnect_due)

    def _reconnect_due(self) -> None:
        self._reconnect_handle = None
        if self._closed or self._attempt_active():
            return
        self._update_stats(reconnect_attempts=self._stats.reconnect_attempts + 1)
        self._logger.info("Reconnecting to %s (attempt %d)", self._url, self._stats.reconnect_attempts)
        self._start_attempt()

    def _ensure_rate_task(self) -> None:
        if self._rate_task is not None:
            return
        assert self._loop is not None  # noqa: S101
        # The first window starts with sampling, not with construction.
        self._sampler.reset()
        self._rate_task = self._loop.create_task(self._sample_rate(), name="nightfall-rate")

    async def _sample_rate(self) -> None:
        while True:
            await asyncio.sleep(self._rate_window)
            rate = self._sampler.sample()
            if rate is not None and rate != self._stats.msg_rate:
                self._update_stats(msg_rate=rate)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _update_stats(self, **changes: Any) -> None:
        self._stats = self._stats.model_copy(update=changes)

    def _set_status(self, status: LinkStatus) -> None:
        if status is self._status:
            return
        self._logger.debug("Link status %s -> %s", self._status.value, status.value)
        self._status = status
        if self._on_status is None:
            return
        try:
            self._on_status(status)
        except Exception:
            self._logger.warning("Status handler failed status=%s", status.value, exc_info=True)
