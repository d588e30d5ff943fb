"""JSON method codec adapter.

Implements the core MethodCodec port with UTF-8 JSON:

- method call: ``{"method": <name>, "args": <arguments>}``
- success envelope: ``[<result>]``
- error envelope: ``[<code>, <message>, <details>]``
"""

from __future__ import annotations

import json
from typing import Any, Optional

from channel_mock.core.errors import ChannelError, CodecError
from channel_mock.core.models import MethodCall


class JSONMethodCodec:
    """Codec that satisfies the MethodCodec contract using JSON text."""

    def _dumps(self, value: Any) -> bytes:
        try:
            return json.dumps(value, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise CodecError(f"Value is not JSON encodable: {exc}") from exc

    def _loads(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise CodecError(f"Invalid JSON on channel: {exc}") from exc

    def encode_method_call(self, call: MethodCall) -> bytes:
        return self._dumps({"method": call.method, "args": call.arguments})

    def decode_method_call(self, data: bytes) -> MethodCall:
        decoded = self._loads(data)
        if not isinstance(decoded, dict) or not isinstance(decoded.get("method"), str):
            raise CodecError(f"Invalid method call: {decoded!r}")
        return MethodCall(decoded["method"], decoded.get("args"))

    def encode_success_envelope(self, result: Any) -> bytes:
        return self._dumps([result])

    def encode_error_envelope(self, code: str, message: Optional[str] = None, details: Any = None) -> bytes:
        return self._dumps([code, message, details])

    def decode_envelope(self, data: bytes) -> Any:
        """Return the result carried by ``data`` or raise the error it carries."""

        decoded = self._loads(data)
        if not isinstance(decoded, list):
            raise CodecError(f"Expected envelope list, got: {decoded!r}")

        if len(decoded) == 1:
            return decoded[0]

        if (
            len(decoded) == 3
            and isinstance(decoded[0], str)
            and (decoded[1] is None or isinstance(decoded[1], str))
        ):
            raise ChannelError(decoded[0], decoded[1], decoded[2])

        raise CodecError(f"Invalid envelope: {decoded!r}")
