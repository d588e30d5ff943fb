"""Invocation rules: one optional matcher bound to one behavior (core domain)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from channel_mock.core.errors import ChannelError
from channel_mock.core.matchers import ArgumentMatcher
from channel_mock.core.models import (
    CallResult,
    MethodCall,
    MockCallHandler,
    ResponseArgumentGenerator,
    ResponseCallback,
)

if TYPE_CHECKING:
    from channel_mock.core.dispatcher import ChannelMock

LOGGER = logging.getLogger(__name__)

Executor = Callable[[int, Any], CallResult]


def _guarded(handler: MockCallHandler) -> Executor:
    """Run a user callable and capture whatever it raises as the call's error."""

    def executor(handle: int, arguments: Any) -> CallResult:
        try:
            return CallResult.success(handler(handle, arguments))
        except Exception as exc:
            return CallResult.failure(exc)

    return executor


class InvocationRule:
    """Describe how the mock answers one kind of call.

    A rule is created by :meth:`ChannelMock.when` or :meth:`ChannelMock.otherwise`
    and configured with exactly one ``then_*`` method. Each ``then_*`` method
    replaces any behavior set before and hands back the owning mock, so rules
    chain::

        mock.when("currentUser").then_return(user).when("signOut").then_return(None)
    """

    def __init__(self, owner: "ChannelMock", matcher: Optional[ArgumentMatcher] = None) -> None:
        self._owner = owner
        self._matcher = matcher
        self._executor: Optional[Executor] = None
        self.behavior: Optional[str] = None

    @property
    def matcher(self) -> Optional[ArgumentMatcher]:
        return self._matcher

    @property
    def is_configured(self) -> bool:
        return self._executor is not None

    def matches(self, arguments: Any) -> bool:
        """Return True when this rule should answer a call with ``arguments``.

        A rule without a behavior never matches, even if its matcher would
        accept the arguments.
        """

        if self._executor is None:
            return False
        return self._matcher is None or self._matcher.matches(arguments)

    def run(self, handle: int, arguments: Any) -> CallResult:
        if self._executor is None:
            return CallResult.success(None)
        return self._executor(handle, arguments)

    def _set(self, behavior: str, executor: Executor) -> "ChannelMock":
        self.behavior = behavior
        self._executor = executor
        return self._owner

    def then_return_handle(self) -> "ChannelMock":
        """Answer with the handle allocated to the call."""

        return self._set("return_handle", lambda handle, _: CallResult.success(handle))

    def then_return(self, value: Any) -> "ChannelMock":
        """Answer every matching call with ``value`` (the same object each time)."""

        return self._set("return", lambda _handle, _arguments: CallResult.success(value))

    def then_raise(self, error: Any) -> "ChannelMock":
        """Fail every matching call with ``error``.

        Values that are not exceptions are wrapped in a :class:`ChannelError`
        with the ``"error"`` code.
        """

        if not isinstance(error, BaseException):
            error = ChannelError("error", str(error))
        return self._set("raise", lambda _handle, _arguments: CallResult.failure(error))

    def then_call(self, handler: MockCallHandler) -> "ChannelMock":
        """Answer with ``handler(handle, arguments)``; its exceptions fail the call."""

        return self._set("call", _guarded(handler))

    def then_respond(
        self,
        response_method: str,
        argument_generator: Optional[ResponseArgumentGenerator] = None,
        response_callback: Optional[ResponseCallback] = None,
    ) -> "ChannelMock":
        """Push a ``response_method`` call back through the channel.

        The pushed call looks as if the remote side started it, which is how
        "start listening" style methods get their first event. Its arguments
        come from ``argument_generator(handle, arguments)`` when given. Once
        the application answers, the decoded reply is handed to
        ``response_callback``. The matching call itself always returns its
        handle.
        """

        owner = self._owner

        def respond(handle: int, arguments: Any) -> Any:
            response_arguments = None
            if argument_generator is not None:
                response_arguments = argument_generator(handle, arguments)

            channel = owner.channel
            codec = channel.codec

            def on_reply(reply: Optional[bytes]) -> None:
                if response_callback is None:
                    return
                decoded = None if reply is None else codec.decode_envelope(reply)
                response_callback(decoded)

            LOGGER.debug("Pushing %s on %s for handle %d", response_method, channel.name, handle)
            channel.push(codec.encode_method_call(MethodCall(response_method, response_arguments)), on_reply)

            # Listeners use the handle to route later events, so it is the result.
            return handle

        return self._set("respond", _guarded(respond))
