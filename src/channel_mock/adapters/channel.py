"""Method channel adapter.

A named channel that sends method calls through a BinaryMessenger using a
MethodCodec. It satisfies the core MockableChannel port, so a ChannelMock can
be attached to it directly.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from channel_mock.adapters.json_codec import JSONMethodCodec
from channel_mock.adapters.messenger import BinaryMessenger, ChannelBuffers, MessageHandler
from channel_mock.core.errors import ChannelError, MissingHandlerError
from channel_mock.core.models import MethodCall, ReplyCallback
from channel_mock.core.ports import MethodCodec

LOGGER = logging.getLogger(__name__)

MethodCallHandler = Callable[[MethodCall], Union[Any, Awaitable[Any]]]

_default_messenger: Optional[BinaryMessenger] = None


def get_default_messenger() -> BinaryMessenger:
    """Return the process-wide messenger, built from settings on first use."""

    global _default_messenger
    if _default_messenger is None:
        # Imported lazily so that building channels never requires a config file.
        from channel_mock.settings import load_settings

        _default_messenger = BinaryMessenger(ChannelBuffers(load_settings().buffers))
    return _default_messenger


def _wrap_handler(codec: MethodCodec, handler: MethodCallHandler) -> MessageHandler:
    """Adapt a MethodCall handler to the raw bytes level of the messenger.

    Errors become error envelopes so the other side sees a failed call rather
    than a broken channel; NotImplementedError means "no answer".
    """

    async def handle(data: bytes) -> Optional[bytes]:
        call = codec.decode_method_call(data)
        try:
            result = handler(call)
            if inspect.isawaitable(result):
                result = await result
        except ChannelError as exc:
            return codec.encode_error_envelope(exc.code, exc.message, exc.details)
        except NotImplementedError:
            return None
        except Exception as exc:
            LOGGER.debug("Handler for %s failed: %r", call.method, exc)
            return codec.encode_error_envelope("error", str(exc), None)
        return codec.encode_success_envelope(result)

    return handle


class MethodChannel:
    """Named channel for invoking methods on the remote side."""

    def __init__(
        self,
        name: str,
        codec: Optional[MethodCodec] = None,
        messenger: Optional[BinaryMessenger] = None,
    ) -> None:
        self._name = name
        self._codec = codec or JSONMethodCodec()
        self._messenger = messenger

    @property
    def name(self) -> str:
        return self._name

    @property
    def codec(self) -> MethodCodec:
        return self._codec

    @property
    def messenger(self) -> BinaryMessenger:
        return self._messenger or get_default_messenger()

    async def invoke_method(self, method: str, arguments: Any = None) -> Any:
        """Call ``method`` on the remote side and return its decoded result.

        Raises :class:`ChannelError` when the call fails and
        :class:`MissingHandlerError` when nothing answers on this channel.
        """

        data = self._codec.encode_method_call(MethodCall(method, arguments))
        reply = await self.messenger.send(self._name, data)
        if reply is None:
            raise MissingHandlerError(self._name, method)
        return self._codec.decode_envelope(reply)

    def set_method_call_handler(self, handler: Optional[MethodCallHandler]) -> None:
        """Handle calls pushed to this channel from the remote side."""

        wrapped = None if handler is None else _wrap_handler(self._codec, handler)
        self.messenger.set_message_handler(self._name, wrapped)

    def set_mock_method_call_handler(self, handler: Optional[MethodCallHandler]) -> None:
        """Answer calls made on this channel locally instead of remotely."""

        wrapped = None if handler is None else _wrap_handler(self._codec, handler)
        self.messenger.set_mock_message_handler(self._name, wrapped)

    def push(self, data: bytes, callback: Optional[ReplyCallback] = None) -> None:
        """Deliver an encoded call to this channel as if the remote side sent it."""

        self.messenger.push(self._name, data, callback)
