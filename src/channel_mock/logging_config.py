"""Logging setup for test suites that want to see channel traffic.

Handlers are attached to the ``channel_mock`` logger only, so the host test
runner's own logging setup is left alone. Calling :func:`configure_logging`
again replaces whatever the previous call installed.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from channel_mock.settings import Settings

ROOT_LOGGER = "channel_mock"

_INSTALLED = "_channel_mock_installed"
_FORMAT = "%(asctime)s %(levelname)s [%(component)s] %(message)s"
_DATEFMT = "%H:%M:%S"


class _ComponentFormatter(logging.Formatter):
    """Label each record with the engine part that emitted it.

    ``channel_mock.core.dispatcher`` shows up as ``[dispatcher]`` and
    ``channel_mock.adapters.messenger`` as ``[messenger]``, which keeps
    interleaved dispatch and push lines readable in test output.
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.name == ROOT_LOGGER or record.name.startswith(ROOT_LOGGER + "."):
            record.component = record.name.rsplit(".", 1)[-1]
        else:
            record.component = record.name
        return super().format(record)


def remove_logging() -> None:
    """Detach and close the handlers installed by :func:`configure_logging`."""

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _INSTALLED, False):
            logger.removeHandler(handler)
            handler.close()


def _file_handler(file_cfg: dict) -> RotatingFileHandler:
    path = file_cfg.get("path", "logs/channel_mock.log")
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 2)),
        encoding="utf-8",
    )


def configure_logging(settings: Settings) -> list[logging.Handler]:
    """Install console and/or rotating file handlers for channel traffic.

    Returns the handlers now attached; the list is empty when logging is
    disabled, in which case earlier handlers are removed as well.
    """

    remove_logging()

    config = settings.logging or {}
    if not config.get("enabled", False):
        return []

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg))

    formatter = _ComponentFormatter(fmt=_FORMAT, datefmt=_DATEFMT)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _INSTALLED, True)
        logger.addHandler(handler)
    return handlers
