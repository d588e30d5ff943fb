from __future__ import annotations

import asyncio
from typing import Any

import pytest

from channel_mock import (
    ArgumentMatcher,
    BinaryMessenger,
    ChannelError,
    ChannelMock,
    MethodCall,
    MethodChannel,
    MissingHandlerError,
)

CHANNEL_NAME = "plugins.test/channel_mock"


def _make_channel() -> tuple[MethodChannel, list[MethodCall]]:
    """Channel whose application side echoes 'identity' calls and logs everything."""

    channel = MethodChannel(CHANNEL_NAME, messenger=BinaryMessenger())
    channel_log: list[MethodCall] = []

    async def app_handler(call: MethodCall) -> Any:
        channel_log.append(call)
        if call.method == "identity":
            return call.arguments
        return True

    channel.set_method_call_handler(app_handler)
    return channel, channel_log


def test_default_handler_through_channel() -> None:
    async def scenario() -> None:
        channel, _ = _make_channel()
        mock = ChannelMock(channel)

        assert await channel.invoke_method("identity", {"channel": "test"}) is None

        expected = {"result": "our mock is functional"}
        mock.otherwise().then_return(expected)
        assert await channel.invoke_method("identity", {"channel": "test"}) == expected

        mock.otherwise().then_return(True)
        assert await channel.invoke_method("identity", {"channel": "test"}) is True

    asyncio.run(scenario())


def test_return_handle_through_channel() -> None:
    async def scenario() -> list[int]:
        channel, _ = _make_channel()
        ChannelMock(channel).when("handler").then_return_handle()
        return [await channel.invoke_method("handler") for _ in range(3)]

    assert asyncio.run(scenario()) == [0, 1, 2]


def test_then_raise_reaches_caller_as_channel_error() -> None:
    async def scenario() -> None:
        channel, _ = _make_channel()
        mock = ChannelMock(channel)
        mock.when("exception").then_raise("my error")
        mock.when("detailed").then_raise(ChannelError("denied", "no access", {"retry": False}))
        mock.when("crash").then_raise(RuntimeError("boom"))

        with pytest.raises(ChannelError) as info:
            await channel.invoke_method("exception")
        assert (info.value.code, info.value.message) == ("error", "my error")

        with pytest.raises(ChannelError) as info:
            await channel.invoke_method("detailed")
        assert info.value.code == "denied"
        assert info.value.details == {"retry": False}

        with pytest.raises(ChannelError) as info:
            await channel.invoke_method("crash")
        assert info.value.message == "boom"

        # The mock keeps working after failed calls.
        mock.when("after").then_return("fine")
        assert await channel.invoke_method("after") == "fine"

    asyncio.run(scenario())


def test_invoke_without_mock_raises_missing_handler() -> None:
    async def scenario() -> None:
        channel, _ = _make_channel()
        with pytest.raises(MissingHandlerError) as info:
            await channel.invoke_method("nothing")
        assert info.value.method == "nothing"
        assert info.value.channel == CHANNEL_NAME

    asyncio.run(scenario())


def test_then_respond_round_trip() -> None:
    async def scenario() -> tuple[Any, Any, list[MethodCall]]:
        channel, channel_log = _make_channel()
        mock = ChannelMock(channel)
        replied: asyncio.Future = asyncio.get_running_loop().create_future()

        mock.when("ping").then_respond(
            "identity",
            lambda handle, args: {"callArgs": args, "genArgs": [1, 2, 3]},
            replied.set_result,
        )

        result = await channel.invoke_method("ping", {"key": "value"})
        callback_result = await asyncio.wait_for(replied, timeout=1)
        return result, callback_result, channel_log

    result, callback_result, channel_log = asyncio.run(scenario())

    expected = {"callArgs": {"key": "value"}, "genArgs": [1, 2, 3]}
    assert result == 0
    assert callback_result == expected
    assert channel_log == [MethodCall("identity", expected)]


def test_then_respond_with_start_and_changed() -> None:
    async def scenario() -> tuple[Any, Any]:
        channel, _ = _make_channel()
        mock = ChannelMock(channel)
        replied: asyncio.Future = asyncio.get_running_loop().create_future()
        mock.when("start").then_respond("identity", lambda handle, _: {"id": handle}, replied.set_result)

        handle = await channel.invoke_method("start", {})
        return handle, await asyncio.wait_for(replied, timeout=1)

    assert asyncio.run(scenario()) == (0, {"id": 0})


def test_then_respond_is_buffered_until_app_listens() -> None:
    async def scenario() -> tuple[Any, list[MethodCall]]:
        messenger = BinaryMessenger()
        channel = MethodChannel(CHANNEL_NAME, messenger=messenger)
        replies: list[Any] = []
        ChannelMock(channel).when("startListening").then_respond(
            "onStateChanged", lambda handle, _: {"id": handle}, replies.append
        )

        await channel.invoke_method("startListening")
        assert messenger.buffers.pending(CHANNEL_NAME) == 1

        received: list[MethodCall] = []

        def listener(call: MethodCall) -> str:
            received.append(call)
            return "ack"

        channel.set_method_call_handler(listener)
        await messenger.flush()
        return replies, received

    replies, received = asyncio.run(scenario())
    assert replies == ["ack"]
    assert received == [MethodCall("onStateChanged", {"id": 0})]


def test_then_respond_unanswered_push_gives_none() -> None:
    async def scenario() -> list[Any]:
        messenger = BinaryMessenger()
        channel = MethodChannel(CHANNEL_NAME, messenger=messenger)
        replies: list[Any] = []

        def not_implemented(call: MethodCall) -> Any:
            raise NotImplementedError(call.method)

        channel.set_method_call_handler(not_implemented)
        ChannelMock(channel).when("listen").then_respond("event", None, replies.append)

        await channel.invoke_method("listen")
        await messenger.flush()
        return replies

    assert asyncio.run(scenario()) == [None]


def test_exact_matchers_through_channel() -> None:
    async def scenario() -> list[Any]:
        channel, _ = _make_channel()
        mock = ChannelMock(channel)
        object_arg = {"this": "object", "has": "values"}
        mock.when("handler", ArgumentMatcher.exactly(object_arg)).then_return("was object")
        mock.when("handler", ArgumentMatcher.exactly([1, 2, 3])).then_return("was list")
        mock.when("handler", ArgumentMatcher.exactly(True)).then_return("was boolean")
        mock.when("handler", ArgumentMatcher.exactly("my string")).then_return("was string")
        mock.when("handler").then_return("was default")

        calls = [
            "my string",
            {"has": "values", "this": "object"},
            [3, 1, 2],
            True,
            "other string",
            {"other": "object"},
            ["other", "list"],
            False,
            None,
        ]
        return [await channel.invoke_method("handler", args) for args in calls]

    assert asyncio.run(scenario()) == [
        "was string",
        "was object",
        "was list",
        "was boolean",
        "was default",
        "was default",
        "was default",
        "was default",
        "was default",
    ]


def test_contains_matchers_through_channel() -> None:
    async def scenario() -> list[Any]:
        channel, _ = _make_channel()
        mock = ChannelMock(channel)
        mock.when("handler", ArgumentMatcher.contains({"string": "my string"})).then_return("was string")
        mock.when("handler", ArgumentMatcher.contains({"double": 3.141})).then_return("was double")
        mock.when("handler", ArgumentMatcher.contains({"int": 12345})).then_return("was int")
        mock.when(
            "handler", ArgumentMatcher.contains({"obj": {"key": "value", "second": "entry"}})
        ).then_return("was obj")
        mock.when("handler", ArgumentMatcher.contains({"list": [1, 2, 3, 4, 5]})).then_return("was list")
        mock.when("handler").then_return("was default")

        args: dict[str, Any] = {
            "string": "my string",
            "int": 12345,
            "double": 3.141,
            "list": [1, 2, 3, 4, 5],
            "obj": {"key": "value", "second": "entry"},
        }
        results = []
        for key in ("string", "double", "int", "obj", "list"):
            results.append(await channel.invoke_method("handler", args))
            del args[key]
        results.append(await channel.invoke_method("handler", args))

        results.append(await channel.invoke_method("handler", {"obj": {"second": "entry", "key": "value"}}))
        results.append(await channel.invoke_method("handler", {"list": [5, 4, 3, 2, 1]}))
        results.append(await channel.invoke_method("handler", {"int": 54321}))
        results.append(await channel.invoke_method("handler", {"list": [1, 2, 3]}))
        results.append(await channel.invoke_method("handler", {"obj": {"key": "value"}}))
        results.append(await channel.invoke_method("handler", 5))
        return results

    assert asyncio.run(scenario()) == [
        "was string",
        "was double",
        "was int",
        "was obj",
        "was list",
        "was default",
        "was obj",
        "was list",
        "was default",
        "was default",
        "was default",
        "was default",
    ]


def test_log_through_channel_holds_decoded_arguments() -> None:
    async def scenario() -> ChannelMock:
        channel, _ = _make_channel()
        mock = ChannelMock(channel)
        await channel.invoke_method("save", {"id": 1})
        await channel.invoke_method("save", [1, 2])
        return mock

    mock = asyncio.run(scenario())
    assert mock.log["save"] == ({"id": 1}, [1, 2])


def test_then_respond_outside_event_loop_defers_push() -> None:
    messenger = BinaryMessenger()
    channel = MethodChannel(CHANNEL_NAME, messenger=messenger)
    received: list[MethodCall] = []
    replies: list[Any] = []

    def listener(call: MethodCall) -> bool:
        received.append(call)
        return True

    channel.set_method_call_handler(listener)
    mock = ChannelMock(channel)
    mock.when("start").then_respond("changed", lambda handle, _: {"id": handle}, replies.append)

    result = mock.dispatch(MethodCall("start", {}))

    assert result.ok
    assert result.value == 0
    assert messenger.deferred == 1
    assert received == []

    asyncio.run(messenger.flush())

    assert messenger.deferred == 0
    assert received == [MethodCall("changed", {"id": 0})]
    assert replies == [True]
