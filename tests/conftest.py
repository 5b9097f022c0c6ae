"""Pytest fixtures for the DiscordManager test suite."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio

from DiscordManager import DiscordManager, LoginCredentials
from DiscordManager.kernel.event_emitter import EventEmitter
from tests.fakes import CallLog, FakeGateway


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def gateway(call_log: CallLog) -> FakeGateway:
    return FakeGateway(log=call_log)


@pytest_asyncio.fixture
async def make_manager(
    call_log: CallLog,
) -> AsyncIterator[Callable[..., DiscordManager]]:
    """Build managers wired to a FakeGateway; all are disposed on teardown."""
    created: list[DiscordManager] = []

    def factory(gateway: FakeGateway | None = None, credentials: bool = True) -> DiscordManager:
        manager = DiscordManager(gateway or FakeGateway(log=call_log))
        manager.add_service(CallLog, call_log)
        if credentials:
            manager.with_credentials(LoginCredentials("test-token"))
        created.append(manager)
        return manager

    yield factory

    for manager in created:
        await manager.dispose()


@pytest.fixture
def clean_framework_logger():
    logger = logging.getLogger("DiscordManager")
    before = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
