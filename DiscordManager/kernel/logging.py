"""
Logging System - Centralized logging management.

Provides colored console logging, file logging with log rotation, and a
bridge that forwards LogEvent/TraceEvent from the event bus to ``logging``.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

import colorlog

from DiscordManager.events.logging import LogEvent, TraceEvent

if TYPE_CHECKING:
    from DiscordManager.kernel.event_emitter import EventEmitter

ROOT_LOGGER = "DiscordManager"
EVENTS_LOGGER = "DiscordManager.events"

_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int | str = "INFO", log_file: str | None = None) -> logging.Logger:
    """
    Configure the framework logger.

    Console output is colored; the optional file handler rotates at 10 MB.
    Calling it again replaces the handlers installed by a previous call.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, "_discord_manager", False):
            root.removeHandler(handler)
            handler.close()

    console_formatter = colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s | %(levelname)-8s | %(name)s%(reset)s | %(message)s",
        datefmt=_DATE_FORMAT,
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(level)
    console_handler._discord_manager = True  # type: ignore[attr-defined]
    root.addHandler(console_handler)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        file_handler._discord_manager = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    root.debug("Logging initialized (level=%s)", logging.getLevelName(level))
    return root


class EventLogBridge:
    """
    Forwards diagnostic events from the bus to the ``logging`` module.

    LogEvent goes out at INFO, TraceEvent at DEBUG.
    """

    def __init__(self, emitter: EventEmitter, logger: logging.Logger | None = None) -> None:
        self._emitter = emitter
        self._logger = logger or logging.getLogger(EVENTS_LOGGER)
        self._attached = False

    def attach(self) -> EventLogBridge:
        if not self._attached:
            self._emitter.add_listener(LogEvent, self._on_log)
            self._emitter.add_listener(TraceEvent, self._on_trace)
            self._attached = True
        return self

    def detach(self) -> None:
        if self._attached:
            self._emitter.remove_listener(LogEvent, self._on_log)
            self._emitter.remove_listener(TraceEvent, self._on_trace)
            self._attached = False

    def _on_log(self, event: LogEvent) -> None:
        self._logger.info("%s", event.message)

    def _on_trace(self, event: TraceEvent) -> None:
        self._logger.debug("%s", event.message)
