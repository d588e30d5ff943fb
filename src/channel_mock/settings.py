"""Configuration for channel-mock.

Settings come from an optional JSON file named by ``CHANNEL_MOCK_CONFIG``
(read after ``.env`` is loaded), with a few environment overrides on top, so
a test suite can tune buffering and logging without touching Python.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from dotenv import load_dotenv

from channel_mock.core.config import BufferConfig

CONFIG_ENV = "CHANNEL_MOCK_CONFIG"
BUFFER_CAPACITY_ENV = "CHANNEL_MOCK_BUFFER_CAPACITY"
LOG_LEVEL_ENV = "CHANNEL_MOCK_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """Resolved settings consumed by the adapters and logging setup."""

    buffers: BufferConfig = field(default_factory=BufferConfig)
    logging: dict[str, Any] = field(default_factory=dict)


def _load_json_config(path: str) -> dict:
    """Load the JSON config file with a flat, user-friendly schema."""

    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def load_settings(path: Optional[str] = None) -> Settings:
    """Build Settings from ``path`` (or ``$CHANNEL_MOCK_CONFIG``) and the environment.

    Without any config file every setting has its default: a one-message
    buffer per channel and logging left to the host application.
    """

    load_dotenv()

    path = path or os.getenv(CONFIG_ENV)
    config = _load_json_config(path) if path else {}

    # Pushed messages waiting for a handler; 1 keeps only the latest.
    _buffers = config.get("buffers", {})
    capacity = int(os.getenv(BUFFER_CAPACITY_ENV, _buffers.get("capacity", 1)))

    # Logging configuration (optional); the env level wins over the file.
    logging_config = dict(config.get("logging", {}))
    level = os.getenv(LOG_LEVEL_ENV)
    if level:
        logging_config["level"] = level

    return Settings(buffers=BufferConfig(capacity=capacity), logging=logging_config)
