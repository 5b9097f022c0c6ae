"""Tests for logging setup and the event-bus log bridge."""

from __future__ import annotations

import logging
from pathlib import Path

import colorlog
import pytest

from DiscordManager.events.logging import LogEvent, TraceEvent
from DiscordManager.kernel.event_emitter import EventEmitter
from DiscordManager.kernel.logging import EVENTS_LOGGER, EventLogBridge, setup_logging


def test_setup_logging_installs_colored_console_and_rotating_file(
    clean_framework_logger: logging.Logger, tmp_path: Path
) -> None:
    log_file = tmp_path / "logs" / "bot.log"

    logger = setup_logging("debug", str(log_file))

    assert logger is clean_framework_logger
    assert logger.level == logging.DEBUG
    formatters = [type(h.formatter) for h in logger.handlers if getattr(h, "_discord_manager", False)]
    assert colorlog.ColoredFormatter in formatters
    assert log_file.parent.is_dir()


def test_setup_logging_replaces_previous_handlers(
    clean_framework_logger: logging.Logger,
) -> None:
    setup_logging("INFO")
    setup_logging("WARNING")

    ours = [h for h in clean_framework_logger.handlers if getattr(h, "_discord_manager", False)]
    assert len(ours) == 1
    assert clean_framework_logger.level == logging.WARNING


def test_bridge_forwards_log_and_trace_events(caplog: pytest.LogCaptureFixture) -> None:
    emitter = EventEmitter()
    EventLogBridge(emitter).attach()

    with caplog.at_level(logging.DEBUG, logger=EVENTS_LOGGER):
        emitter.emit(LogEvent("All plugins loaded."))
        emitter.emit(TraceEvent("Successfully executed all start methods."))

    records = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == EVENTS_LOGGER]
    assert records == [
        (logging.INFO, "All plugins loaded."),
        (logging.DEBUG, "Successfully executed all start methods."),
    ]


def test_bridge_attach_is_idempotent_and_detach_unsubscribes() -> None:
    emitter = EventEmitter()
    bridge = EventLogBridge(emitter).attach().attach()

    assert emitter.listener_count() == 2

    bridge.detach()
    bridge.detach()

    assert emitter.listener_count() == 0
