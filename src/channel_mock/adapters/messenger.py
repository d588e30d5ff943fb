"""In-process binary messenger adapter.

Carries encoded messages between the application side of a channel and the
(mocked) remote side, all on the running asyncio loop:

- outgoing messages (``send``) go to the channel's mock handler;
- pushed messages (``push``) go to the channel's application handler, or wait
  in a bounded per-channel buffer until one is registered.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Optional

from channel_mock.core.config import BufferConfig
from channel_mock.core.models import ReplyCallback

LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[bytes], Awaitable[Optional[bytes]]]

_Pending = tuple[bytes, Optional[ReplyCallback]]


class ChannelBuffers:
    """Hold pushed messages for channels that nobody listens to yet."""

    def __init__(self, config: Optional[BufferConfig] = None) -> None:
        self._config = config or BufferConfig()
        self._queues: dict[str, deque[_Pending]] = {}

    @property
    def capacity(self) -> int:
        return self._config.capacity

    def push(self, channel: str, data: bytes, callback: Optional[ReplyCallback]) -> None:
        """Store a message; the oldest one is dropped (answered with None) on overflow."""

        queue = self._queues.setdefault(channel, deque())
        queue.append((data, callback))
        while len(queue) > self._config.capacity:
            _, dropped_callback = queue.popleft()
            LOGGER.warning("Buffer for %s overflowed, dropping oldest message", channel)
            if dropped_callback is not None:
                dropped_callback(None)

    def drain(self, channel: str) -> list[_Pending]:
        queue = self._queues.pop(channel, None)
        return list(queue) if queue else []

    def pending(self, channel: str) -> int:
        return len(self._queues.get(channel, ()))


class BinaryMessenger:
    """Route raw channel messages between both ends of in-process channels."""

    def __init__(self, buffers: Optional[ChannelBuffers] = None) -> None:
        self._buffers = buffers or ChannelBuffers()
        self._handlers: dict[str, MessageHandler] = {}
        self._mock_handlers: dict[str, MessageHandler] = {}
        self._tasks: set[asyncio.Task] = set()
        self._deferred: deque[tuple[str, MessageHandler, bytes, Optional[ReplyCallback]]] = deque()

    @property
    def buffers(self) -> ChannelBuffers:
        return self._buffers

    def set_message_handler(self, channel: str, handler: Optional[MessageHandler]) -> None:
        """Register the application handler for messages pushed on ``channel``.

        Messages buffered while the channel had no handler are delivered now.
        """

        if handler is None:
            self._handlers.pop(channel, None)
            return

        self._handlers[channel] = handler
        for data, callback in self._buffers.drain(channel):
            self._schedule(channel, handler, data, callback)

    def set_mock_message_handler(self, channel: str, handler: Optional[MessageHandler]) -> None:
        """Register the handler that answers messages sent out on ``channel``."""

        if handler is None:
            self._mock_handlers.pop(channel, None)
        else:
            self._mock_handlers[channel] = handler

    def has_mock_handler(self, channel: str) -> bool:
        return channel in self._mock_handlers

    async def send(self, channel: str, data: bytes) -> Optional[bytes]:
        """Send a message out on ``channel``; None means nobody answered."""

        handler = self._mock_handlers.get(channel)
        if handler is None:
            LOGGER.debug("No mock handler on %s", channel)
            return None
        return await handler(data)

    def push(self, channel: str, data: bytes, callback: Optional[ReplyCallback] = None) -> None:
        """Deliver ``data`` to the application side of ``channel`` as an incoming message.

        Delivery happens in a separate task on the running loop, or on the
        next :meth:`flush` when no loop is running; ``callback``
        receives the reply bytes, or None if the handler had no answer.
        """

        handler = self._handlers.get(channel)
        if handler is None:
            self._buffers.push(channel, data, callback)
            return
        self._schedule(channel, handler, data, callback)

    def _schedule(
        self,
        channel: str,
        handler: MessageHandler,
        data: bytes,
        callback: Optional[ReplyCallback],
    ) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Dispatched from synchronous code: the next flush() delivers it.
            LOGGER.debug("No running loop, deferring pushed message on %s", channel)
            self._deferred.append((channel, handler, data, callback))
            return

        task = loop.create_task(self._deliver(channel, handler, data, callback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(
        self,
        channel: str,
        handler: MessageHandler,
        data: bytes,
        callback: Optional[ReplyCallback],
    ) -> None:
        reply = await handler(data)
        LOGGER.debug("Pushed message on %s answered (%s)", channel, "no reply" if reply is None else "reply")
        if callback is not None:
            callback(reply)

    async def flush(self) -> None:
        """Deliver deferred pushes and wait for every in-flight one.

        The first failure raised by a delivery or its reply callback is
        re-raised here.
        """

        while self._deferred or self._tasks:
            while self._deferred:
                self._schedule(*self._deferred.popleft())
            tasks = list(self._tasks)
            self._tasks.difference_update(tasks)
            await asyncio.gather(*tasks)

    @property
    def deferred(self) -> int:
        """Pushed messages waiting for a running loop."""

        return len(self._deferred)
