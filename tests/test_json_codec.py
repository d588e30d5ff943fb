from __future__ import annotations

import pytest

from channel_mock.adapters.json_codec import JSONMethodCodec
from channel_mock.core.errors import ChannelError, CodecError
from channel_mock.core.models import MethodCall


def test_method_call_layout() -> None:
    codec = JSONMethodCodec()
    data = codec.encode_method_call(MethodCall("ping", {"key": "value"}))

    assert data == b'{"method":"ping","args":{"key":"value"}}'
    assert codec.decode_method_call(data) == MethodCall("ping", {"key": "value"})


def test_decode_method_call_rejects_missing_method() -> None:
    codec = JSONMethodCodec()
    with pytest.raises(CodecError):
        codec.decode_method_call(b'{"args": 1}')
    with pytest.raises(CodecError):
        codec.decode_method_call(b"not json")


def test_success_envelope_distinguishes_null_result() -> None:
    codec = JSONMethodCodec()

    assert codec.encode_success_envelope(None) == b"[null]"
    assert codec.decode_envelope(b"[null]") is None
    assert codec.decode_envelope(codec.encode_success_envelope([1, 2])) == [1, 2]


def test_error_envelope_raises_channel_error() -> None:
    codec = JSONMethodCodec()
    data = codec.encode_error_envelope("denied", "no access", {"retry": False})

    with pytest.raises(ChannelError) as info:
        codec.decode_envelope(data)
    assert info.value.code == "denied"
    assert info.value.message == "no access"
    assert info.value.details == {"retry": False}


def test_malformed_envelopes() -> None:
    codec = JSONMethodCodec()
    for data in (b"", b"{}", b"[]", b"[1, 2]", b"[1, 2, 3]"):
        with pytest.raises(CodecError):
            codec.decode_envelope(data)


def test_unencodable_value() -> None:
    codec = JSONMethodCodec()
    with pytest.raises(CodecError):
        codec.encode_success_envelope(object())
