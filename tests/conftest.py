"""Shared test doubles: an in-memory socket/opener pair and a manual clock."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable

import pytest

from pynightfall.exceptions import NightfallTransportError

_EOF = object()


class FakeSocket:
    """In-memory `LinkSocket`; the test pushes inbound frames with `feed`."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.close_calls = 0
        self.fail_send = False
        self._closed = False
        self._inbox: asyncio.Queue[object] = asyncio.Queue()

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, data: str | bytes) -> None:
        self._inbox.put_nowait(data)

    def fail(self, exc: BaseException | None = None) -> None:
        """Make the receive loop raise, as a dropped network would."""
        self._inbox.put_nowait(exc or NightfallTransportError("connection reset"))

    def hang_up(self) -> None:
        """Peer closed cleanly."""
        self._inbox.put_nowait(_EOF)

    async def send_text(self, text: str) -> None:
        if self.fail_send or self._closed:
            raise NightfallTransportError("socket is closed")
        self.sent.append(text)

    async def frames(self) -> AsyncIterator[str | bytes]:
        while True:
            item = await self._inbox.get()
            if item is _EOF:
                return
            if isinstance(item, BaseException):
                raise item
            yield item  # type: ignore[misc]

    async def close(self) -> None:
        self.close_calls += 1
        if not self._closed:
            self._closed = True
            self._inbox.put_nowait(_EOF)


class FakeOpener:
    """`LinkOpener` that hands out `FakeSocket`s or raises queued failures."""

    def __init__(self) -> None:
        self.urls: list[str] = []
        self.sockets: list[FakeSocket] = []
        self.failures: list[BaseException] = []

    @property
    def last_socket(self) -> FakeSocket:
        return self.sockets[-1]

    async def open(self, url: str) -> FakeSocket:
        self.urls.append(url)
        if self.failures:
            raise self.failures.pop(0)
        socket = FakeSocket()
        self.sockets.append(socket)
        return socket


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def opener() -> FakeOpener:
    return FakeOpener()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def eventually() -> Callable[..., Awaitable[None]]:
    """Poll *predicate* until it holds, failing after *timeout* seconds."""

    async def _eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met before timeout")
            await asyncio.sleep(0.005)

    return _eventually
