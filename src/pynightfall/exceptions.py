"""Custom exception hierarchy for pynightfall."""

from __future__ import annotations


class NightfallError(Exception):
    """Base exception for all pynightfall errors."""


class NightfallConfigError(NightfallError):
    """Invalid or missing configuration."""


class NightfallTransportError(NightfallError):
    """Socket-level failure (open refused, handshake timeout, receive error)."""

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
    ) -> None:
        self.url = url
        super().__init__(message)


class NightfallFrameError(NightfallError):
    """Inbound frame could not be decoded or failed validation.

    The offending frame is dropped by the link; the connection stays open.
    ``raw`` carries (a prefix of) the original text for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        raw: str = "",
    ) -> None:
        self.raw = raw
        super().__init__(message)
