"""Core domain models.

These dataclasses are shared by the core and the adapters so that neither
side depends on a concrete channel implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class MethodCall:
    """One named call travelling over a channel."""

    method: str
    arguments: Any = None


@dataclass(frozen=True)
class CallResult:
    """Outcome of one dispatched call: a value or an error, never both."""

    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Any) -> "CallResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "CallResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, or raise the error exactly as it was recorded."""

        if self.error is not None:
            raise self.error
        return self.value


# (handle, arguments) -> result value
MockCallHandler = Callable[[int, Any], Any]

# (handle, arguments) -> arguments for the pushed response call
ResponseArgumentGenerator = Callable[[int, Any], Any]

# decoded reply of a pushed response call
ResponseCallback = Callable[[Any], None]

# raw reply bytes (or None) of a pushed message
ReplyCallback = Callable[[Optional[bytes]], None]
