"""Core configuration dataclasses.

Config parsing lives in :mod:`channel_mock.settings`; these dataclasses define
the shape the core and adapters expect.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BufferConfig:
    """Per-channel buffering of pushed messages that have no handler yet."""

    capacity: int = 1

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError(f"Buffer capacity must not be negative: {self.capacity}")
