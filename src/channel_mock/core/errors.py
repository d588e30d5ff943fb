"""Exceptions shared by the core and the channel adapters."""

from __future__ import annotations

from typing import Any, Optional


class ChannelMockError(Exception):
    """Base class for all channel-mock errors."""


class ChannelError(ChannelMockError):
    """A single channel call failed.

    This is what the caller of a channel sees when the other side answers
    with an error envelope, whether that came from a rule configured to raise
    or from a handler that blew up.
    """

    def __init__(self, code: str, message: Optional[str] = None, details: Any = None) -> None:
        super().__init__(code if message is None else f"{code}: {message}")
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"ChannelError(code={self.code!r}, message={self.message!r}, details={self.details!r})"


class MissingHandlerError(ChannelError):
    """No handler answered a call on the channel."""

    def __init__(self, channel: str, method: str) -> None:
        super().__init__(
            "missing_handler",
            f"No implementation found for method {method} on channel {channel}",
        )
        self.channel = channel
        self.method = method


class CodecError(ChannelMockError):
    """Bytes on the channel could not be decoded."""
