"""Helpers for building reusable mock fixtures."""

from __future__ import annotations

from typing import Any, Callable

from channel_mock.core.dispatcher import ChannelMock

Configure = Callable[[ChannelMock], Any]


def combine(*configures: Configure) -> Configure:
    """Return one configure callable that applies ``configures`` in order.

    Rules registered by earlier callables win over later ones for the same
    method, and the last ``otherwise()`` registered is the fallback.
    """

    def configure(mock: ChannelMock) -> None:
        for step in configures:
            step(mock)

    return configure
