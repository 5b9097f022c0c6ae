"""Tests for translating raw gateway events into application events."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from DiscordManager.errors import ConfigurationError
from DiscordManager.events import (
    GatewayEvent,
    Image,
    ImageReceivedEvent,
    MessageReceivedEvent,
    ReactionAddedEvent,
    ReadyEvent,
)
from DiscordManager.gateway.mapper import EventMapper
from DiscordManager.kernel.event_emitter import EventEmitter
from tests.fakes import FakeGateway


def record(emitter: EventEmitter, *event_types: type) -> list[object]:
    seen: list[object] = []
    for event_type in event_types:
        emitter.add_listener(event_type, seen.append)
    return seen


def test_every_raw_event_gets_a_translator(
    gateway: FakeGateway, emitter: EventEmitter
) -> None:
    EventMapper(gateway, emitter).map_all_events()

    for name in gateway.event_names:
        assert gateway.handler_count(name) == 1


def test_ready_is_republished(gateway: FakeGateway, emitter: EventEmitter) -> None:
    seen = record(emitter, ReadyEvent)
    EventMapper(gateway, emitter).map_all_events()

    gateway.dispatch("ready")

    assert seen == [ReadyEvent()]


def test_message_with_images_yields_one_event_per_image(
    gateway: FakeGateway, emitter: EventEmitter
) -> None:
    seen = record(emitter, MessageReceivedEvent, ImageReceivedEvent)
    EventMapper(gateway, emitter).map_all_events()
    message = SimpleNamespace(
        content="look",
        author=SimpleNamespace(id=42),
        channel=SimpleNamespace(id=7),
        attachments=[
            SimpleNamespace(content_type="image/png", url="https://cdn/a.png"),
            SimpleNamespace(content_type="text/plain", url="https://cdn/notes.txt"),
            SimpleNamespace(content_type="image/jpeg", url="https://cdn/b.jpg"),
        ],
    )

    gateway.dispatch("message", message)

    assert seen == [
        MessageReceivedEvent(message, content="look", author_id="42", channel_id="7"),
        ImageReceivedEvent(message, Image("https://cdn/a.png")),
        ImageReceivedEvent(message, Image("https://cdn/b.jpg")),
    ]


def test_two_argument_events_keep_their_payloads(
    gateway: FakeGateway, emitter: EventEmitter
) -> None:
    seen = record(emitter, ReactionAddedEvent)
    EventMapper(gateway, emitter).map_all_events()

    gateway.dispatch("reaction_add", "reaction", "user")

    assert seen == [ReactionAddedEvent("reaction", "user")]


def test_unknown_raw_event_becomes_generic_gateway_event(
    gateway: FakeGateway, emitter: EventEmitter
) -> None:
    seen = record(emitter, GatewayEvent)
    EventMapper(gateway, emitter).map_all_events()

    gateway.dispatch("custom_event", 1, "two")

    assert seen == [GatewayEvent("custom_event", (1, "two"))]


def test_custom_translator_overrides_default(
    gateway: FakeGateway, emitter: EventEmitter
) -> None:
    seen = record(emitter, GatewayEvent)
    mapper = EventMapper(
        gateway, emitter, translators={"ready": lambda: [GatewayEvent("hello")]}
    )
    mapper.map_all_events()

    gateway.dispatch("ready")

    assert seen == [GatewayEvent("hello")]


def test_mapping_twice_is_a_caller_error(
    gateway: FakeGateway, emitter: EventEmitter
) -> None:
    mapper = EventMapper(gateway, emitter)
    mapper.map_all_events()

    with pytest.raises(ConfigurationError):
        mapper.map_all_events()

    assert mapper.is_mapped
    assert gateway.handler_count("ready") == 1


def test_subscribing_to_unknown_raw_event_fails(gateway: FakeGateway) -> None:
    with pytest.raises(ConfigurationError):
        gateway.subscribe("typing", lambda *args: None)
