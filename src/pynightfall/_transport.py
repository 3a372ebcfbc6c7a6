"""WebSocket transport to the robot."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Protocol

import aiohttp

from pynightfall._constants import OPEN_TIMEOUT_S
from pynightfall.exceptions import NightfallTransportError

_logger = logging.getLogger(__name__)


class LinkSocket(Protocol):
    """One open, message-framed, bidirectional connection."""

    @property
    def closed(self) -> bool: ...

    async def send_text(self, text: str) -> None: ...

    def frames(self) -> AsyncIterator[str | bytes]: ...

    async def close(self) -> None: ...


class LinkOpener(Protocol):
    """Structural interface used by the supervisor to open sockets.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`AiohttpLinkOpener`) concrete.
    """

    async def open(self, url: str) -> LinkSocket: ...


class AiohttpLinkSocket:
    """`LinkSocket` backed by an aiohttp client WebSocket."""

    def __init__(self, ws: aiohttp.ClientWebSocketResponse, url: str) -> None:
        self._ws = ws
        self._url = url

    @property
    def closed(self) -> bool:
        return self._ws.closed

    async def send_text(self, text: str) -> None:
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, ConnectionError) as exc:
            raise NightfallTransportError(f"Send to {self._url} failed: {exc}", url=self._url) from exc

    async def frames(self) -> AsyncIterator[str | bytes]:
        """Yield text and binary payloads until the peer closes.

        Iteration ends normally on a close frame and raises
        `NightfallTransportError` on a protocol or network error.
        """
        async for msg in self._ws:
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise NightfallTransportError(
                    f"WebSocket error from {self._url}: {self._ws.exception()}",
                    url=self._url,
                )
        _logger.debug("WebSocket closed by peer url=%s code=%s", self._url, self._ws.close_code)

    async def close(self) -> None:
        if not self._ws.closed:
            await self._ws.close()


class AiohttpLinkOpener:
    """Opens aiohttp WebSockets, optionally on a caller-provided session."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        open_timeout: float = OPEN_TIMEOUT_S,
    ) -> None:
        self._external_session = session is not None
        self._http_session = session
        self._open_timeout = open_timeout

    async def open(self, url: str) -> LinkSocket:
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession()
            self._external_session = False
        _logger.debug("WebSocket open %s", url)
        try:
            async with asyncio.timeout(self._open_timeout):
                ws = await self._http_session.ws_connect(url, autoping=True)
        except TimeoutError as exc:
            raise NightfallTransportError(
                f"WebSocket handshake with {url} timed out after {self._open_timeout}s",
                url=url,
            ) from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise NightfallTransportError(f"WebSocket open {url} failed: {exc}", url=url) from exc
        return AiohttpLinkSocket(ws, url)

    async def close(self) -> None:
        """Close the HTTP session if this opener created it."""
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None
