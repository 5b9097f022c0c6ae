"""Tests for the synchronous typed event emitter."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass

import pytest

from DiscordManager.kernel.event_emitter import EventEmitter


@dataclass
class Ping:
    value: int = 0


@dataclass
class Pong:
    value: int = 0


class SubPing(Ping):
    pass


def test_listeners_run_in_registration_order(emitter: EventEmitter) -> None:
    calls: list[str] = []
    emitter.add_listener(Ping, lambda e: calls.append("first"))
    emitter.add_listener(Ping, lambda e: calls.append("second"))
    emitter.add_listener(Ping, lambda e: calls.append("third"))

    emitter.emit(Ping())

    assert calls == ["first", "second", "third"]


def test_dispatch_is_by_exact_type(emitter: EventEmitter) -> None:
    calls: list[object] = []
    emitter.add_listener(Ping, calls.append)

    emitter.emit(SubPing())
    emitter.emit(Pong())

    assert calls == []


def test_double_registration_fires_twice(emitter: EventEmitter) -> None:
    calls: list[int] = []

    def listener(event: Ping) -> None:
        calls.append(event.value)

    emitter.add_listener(Ping, listener)
    emitter.add_listener(Ping, listener)
    emitter.emit(Ping(7))
    assert calls == [7, 7]

    emitter.remove_listener(Ping, listener)
    emitter.emit(Ping(8))
    assert calls == [7, 7, 8]


def test_removing_absent_listener_is_noop(emitter: EventEmitter) -> None:
    emitter.remove_listener(Ping, lambda e: None)

    emitter.add_listener(Ping, print)
    emitter.remove_listener(Pong, print)

    assert emitter.listener_count(Ping) == 1


def test_listener_removed_by_earlier_listener_is_not_invoked(emitter: EventEmitter) -> None:
    calls: list[str] = []

    def victim(event: Ping) -> None:
        calls.append("victim")

    def remover(event: Ping) -> None:
        calls.append("remover")
        emitter.remove_listener(Ping, victim)

    emitter.add_listener(Ping, remover)
    emitter.add_listener(Ping, victim)

    emitter.emit(Ping())

    assert calls == ["remover"]


def test_self_removal_does_not_skip_following_listeners(emitter: EventEmitter) -> None:
    calls: list[str] = []

    def once(event: Ping) -> None:
        calls.append("once")
        emitter.remove_listener(Ping, once)

    emitter.add_listener(Ping, once)
    emitter.add_listener(Ping, lambda e: calls.append("after"))

    emitter.emit(Ping())
    emitter.emit(Ping())

    assert calls == ["once", "after", "after"]


def test_listener_added_during_emission_waits_for_next_emission(
    emitter: EventEmitter,
) -> None:
    calls: list[str] = []

    def late(event: Ping) -> None:
        calls.append("late")

    def adder(event: Ping) -> None:
        calls.append("adder")
        emitter.add_listener(Ping, late)

    emitter.add_listener(Ping, adder)
    emitter.emit(Ping())
    assert calls == ["adder"]

    emitter.remove_listener(Ping, adder)
    emitter.emit(Ping())
    assert calls == ["adder", "late"]


def test_nested_emission_completes_inside_listener(emitter: EventEmitter) -> None:
    calls: list[str] = []

    def on_ping(event: Ping) -> None:
        calls.append("ping")
        emitter.emit(Pong())
        calls.append("ping-done")

    emitter.add_listener(Ping, on_ping)
    emitter.add_listener(Pong, lambda e: calls.append("pong"))

    emitter.emit(Ping())

    assert calls == ["ping", "pong", "ping-done"]


def test_failing_listener_is_logged_and_isolated(
    emitter: EventEmitter, caplog: pytest.LogCaptureFixture
) -> None:
    calls: list[str] = []

    def broken(event: Ping) -> None:
        raise ValueError("boom")

    emitter.add_listener(Ping, broken)
    emitter.add_listener(Ping, lambda e: calls.append("survivor"))

    with caplog.at_level(logging.ERROR, logger="DiscordManager.kernel.event_emitter"):
        emitter.emit(Ping())

    assert calls == ["survivor"]
    assert any(record.exc_info for record in caplog.records)


@pytest.mark.asyncio
async def test_async_listener_is_scheduled_on_running_loop(emitter: EventEmitter) -> None:
    done = asyncio.Event()

    async def on_ping(event: Ping) -> None:
        done.set()

    emitter.add_listener(Ping, on_ping)
    emitter.emit(Ping())

    await asyncio.wait_for(done.wait(), timeout=1)


def test_listener_count_and_clear(emitter: EventEmitter) -> None:
    emitter.add_listener(Ping, print)
    emitter.add_listener(Ping, print)
    emitter.add_listener(Pong, print)

    assert emitter.listener_count(Ping) == 2
    assert emitter.listener_count() == 3

    emitter.clear()

    assert emitter.listener_count() == 0


def test_random_sequences_match_reference_model(emitter: EventEmitter) -> None:
    """Removed listeners never fire, however the add/remove/emit steps interleave."""
    rng = random.Random(20261019)
    fired: list[int] = []
    listeners = [lambda e, i=i: fired.append(i) for i in range(5)]
    model: list[int] = []

    for _ in range(500):
        op = rng.choice(("add", "remove", "emit"))
        index = rng.randrange(len(listeners))
        if op == "add":
            emitter.add_listener(Ping, listeners[index])
            model.append(index)
        elif op == "remove":
            emitter.remove_listener(Ping, listeners[index])
            if index in model:
                model.remove(index)
        else:
            fired.clear()
            emitter.emit(Ping())
            assert fired == model


def test_async_listener_without_running_loop_is_dropped_with_warning(
    emitter: EventEmitter, caplog: pytest.LogCaptureFixture
) -> None:
    ran: list[Ping] = []

    async def on_ping(event: Ping) -> None:
        ran.append(event)

    emitter.add_listener(Ping, on_ping)

    with caplog.at_level(logging.WARNING, logger="DiscordManager.kernel.event_emitter"):
        emitter.emit(Ping())

    assert ran == []
    assert emitter._pending == set()
    assert any(record.levelno == logging.WARNING for record in caplog.records)
