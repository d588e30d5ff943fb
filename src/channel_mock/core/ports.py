"""Ports (interfaces) used by the interception engine.

Ports define the minimal contracts for the channel and its codec so that the
core can sit on top of any transport that delivers named calls.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from channel_mock.core.models import MethodCall, ReplyCallback


class MethodCodec(Protocol):
    """Turns method calls and their replies into bytes and back."""

    def encode_method_call(self, call: MethodCall) -> bytes:
        ...

    def decode_method_call(self, data: bytes) -> MethodCall:
        ...

    def encode_success_envelope(self, result: Any) -> bytes:
        ...

    def encode_error_envelope(self, code: str, message: Optional[str] = None, details: Any = None) -> bytes:
        ...

    def decode_envelope(self, data: bytes) -> Any:
        ...


class MockableChannel(Protocol):
    """Channel operations required by the interception engine."""

    @property
    def name(self) -> str:
        ...

    @property
    def codec(self) -> MethodCodec:
        ...

    def set_mock_method_call_handler(self, handler: Optional[Callable[[MethodCall], Any]]) -> None:
        ...

    def push(self, data: bytes, callback: Optional[ReplyCallback] = None) -> None:
        ...
