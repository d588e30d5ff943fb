"""Intercept the calls made on a method channel and answer them from rules.

Attach a :class:`ChannelMock` to a channel, register rules with ``when`` /
``otherwise`` and inspect ``log`` afterwards.
"""

from channel_mock.adapters.channel import MethodChannel, get_default_messenger
from channel_mock.adapters.json_codec import JSONMethodCodec
from channel_mock.adapters.messenger import BinaryMessenger, ChannelBuffers
from channel_mock.core.dispatcher import ChannelMock
from channel_mock.core.errors import ChannelError, ChannelMockError, CodecError, MissingHandlerError
from channel_mock.core.matchers import ArgumentMatcher, MatcherKind
from channel_mock.core.models import CallResult, MethodCall
from channel_mock.core.rules import InvocationRule
from channel_mock.fixtures import combine

__all__ = [
    "ArgumentMatcher",
    "BinaryMessenger",
    "CallResult",
    "ChannelBuffers",
    "ChannelError",
    "ChannelMock",
    "ChannelMockError",
    "CodecError",
    "InvocationRule",
    "JSONMethodCodec",
    "MatcherKind",
    "MethodCall",
    "MethodChannel",
    "MissingHandlerError",
    "combine",
    "get_default_messenger",
]

__version__ = "1.0.0"
