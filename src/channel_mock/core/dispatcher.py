"""Call interception and stub dispatch for one channel.

Dispatch order for every call on the bound channel:
1) Record the arguments in the call log
2) Allocate the next handle
3) Run the first configured rule for the method whose matcher accepts
4) Otherwise run the fallback rule with the full MethodCall
5) Otherwise answer None
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, Callable, Optional

from channel_mock.core.matchers import ArgumentMatcher
from channel_mock.core.models import CallResult, MethodCall
from channel_mock.core.ports import MockableChannel
from channel_mock.core.rules import InvocationRule

LOGGER = logging.getLogger(__name__)


class CallLogView(Mapping):
    """Read-only view of a call log; per-method arguments come back as tuples."""

    def __init__(self, call_log: dict[str, list[Any]]) -> None:
        self._call_log = call_log

    def __getitem__(self, method: str) -> tuple[Any, ...]:
        return tuple(self._call_log[method])

    def __iter__(self) -> Iterator[str]:
        return iter(self._call_log)

    def __len__(self) -> int:
        return len(self._call_log)

    def __repr__(self) -> str:
        return f"CallLogView({dict(self)!r})"


class ChannelMock:
    """Intercept the calls made on a channel and answer them from rules.

    ``configure`` is an optional fixture callable that receives the mock after
    construction and after every :meth:`reset`, for rule sets that every test
    should start with.
    """

    def __init__(
        self,
        channel: MockableChannel,
        configure: Optional[Callable[["ChannelMock"], Any]] = None,
    ) -> None:
        self._channel = channel
        self._configure = configure
        self._next_handle = 0
        self._call_log: dict[str, list[Any]] = {}
        self._rules: dict[str, list[InvocationRule]] = {}
        self._fallback: Optional[InvocationRule] = None
        self.reset()

    @property
    def channel(self) -> MockableChannel:
        return self._channel

    @property
    def log(self) -> Mapping[str, tuple[Any, ...]]:
        """Arguments of every call since the last reset, keyed by method.

        The view is live, but each lookup returns a tuple snapshot so callers
        cannot alter the recorded calls.
        """

        return CallLogView(self._call_log)

    @property
    def handle_count(self) -> int:
        return self._next_handle

    def reset(self) -> None:
        """Drop every rule, the fallback, the log and the handle counter."""

        self._next_handle = 0
        # Cleared in place so views handed out by ``log`` stay live.
        self._call_log.clear()
        self._rules.clear()
        self._fallback = None

        self._channel.set_mock_method_call_handler(self.handle_call)
        LOGGER.debug("Mock installed on %s", self._channel.name)

        if self._configure is not None:
            self._configure(self)

    def otherwise(self) -> InvocationRule:
        """Replace the fallback rule used when no method rule matches."""

        self._fallback = InvocationRule(self)
        return self._fallback

    def when(self, method: str, matcher: Optional[ArgumentMatcher] = None) -> InvocationRule:
        """Add a rule for ``method``.

        Only the first matching rule runs for a call. A rule without a matcher
        accepts any arguments, so register it after the more specific ones or
        it will shadow them.
        """

        rule = InvocationRule(self, matcher)
        self._rules.setdefault(method, []).append(rule)
        return rule

    register_default = otherwise
    register_handler = when

    def dispatch(self, call: MethodCall) -> CallResult:
        """Log, match and run one call, returning its result or error."""

        method = call.method
        arguments = call.arguments

        self._call_log.setdefault(method, []).append(arguments)

        handle = self._next_handle
        self._next_handle += 1

        for rule in self._rules.get(method, ()):
            if rule.matches(arguments):
                LOGGER.debug("Call %s #%d answered by %s rule", method, handle, rule.behavior)
                return rule.run(handle, arguments)

        # The fallback sees the whole call so it can tell methods apart.
        if self._fallback is not None:
            LOGGER.debug("Call %s #%d answered by fallback", method, handle)
            return self._fallback.run(handle, call)

        LOGGER.debug("Call %s #%d unmatched", method, handle)
        return CallResult.success(None)

    def handle_call(self, call: MethodCall) -> Any:
        """Channel hook: the dispatched value, or the configured error raised as-is."""

        return self.dispatch(call).unwrap()
