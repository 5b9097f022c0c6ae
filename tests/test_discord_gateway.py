"""Offline tests for the py-cord gateway wrapper."""

from __future__ import annotations

import pytest

from DiscordManager.errors import GatewayConnectionError
from DiscordManager.gateway.base import GatewayStatus
from DiscordManager.gateway.discord_gateway import RAW_EVENTS, DiscordGateway


@pytest.mark.asyncio
async def test_gateway_exposes_raw_events_and_message_intent() -> None:
    gateway = DiscordGateway()

    assert gateway.event_names == RAW_EVENTS
    assert gateway.raw_client.intents.message_content
    assert gateway.status is GatewayStatus.IDLE
    await gateway.close()


@pytest.mark.asyncio
async def test_client_callbacks_dispatch_raw_events() -> None:
    gateway = DiscordGateway()
    seen: list[tuple[object, ...]] = []
    gateway.subscribe("reaction_add", lambda *args: seen.append(args))

    gateway._bind_events()
    await gateway.raw_client.on_reaction_add("reaction", "user")

    assert seen == [("reaction", "user")]
    await gateway.close()


@pytest.mark.asyncio
async def test_wait_closed_before_connect_is_a_connection_error() -> None:
    gateway = DiscordGateway()

    with pytest.raises(GatewayConnectionError):
        await gateway.wait_closed()

    await gateway.close()
    assert gateway.status is GatewayStatus.CLOSED
