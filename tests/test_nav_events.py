# tests/test_nav_events.py
"""
Tests for bot_core.nav.events.NavEventEmitter.
"""

from __future__ import annotations

from typing import List

from bot_core.nav import NavEvent, NavEventEmitter, NavEventType


def test_emit_delivers_in_registration_order() -> None:
    emitter = NavEventEmitter()
    seen: List[str] = []

    emitter.on(NavEventType.START, lambda e: seen.append("a"))
    emitter.on(NavEventType.START, lambda e: seen.append("b"))
    emitter.on(NavEventType.STOP, lambda e: seen.append("other"))

    assert emitter.emit(NavEventType.START, {"destination": (1.0, 2.0)}) is True
    assert seen == ["a", "b"]


def test_cancel_rejects_event() -> None:
    emitter = NavEventEmitter()
    received: List[NavEvent] = []

    def veto(event: NavEvent) -> None:
        received.append(event)
        event.cancel()

    emitter.on(NavEventType.MOVE, veto)

    assert emitter.emit(NavEventType.MOVE, {"position": (0.0, 0.0)}) is False
    assert received[0].canceled
    assert received[0].data == {"position": (0.0, 0.0)}


def test_event_names_accepted_as_strings() -> None:
    emitter = NavEventEmitter()
    seen: List[NavEventType] = []

    emitter.on("engine.move", lambda e: seen.append(e.type))  # type: ignore[arg-type]
    emitter.emit("engine.move")  # type: ignore[arg-type]

    assert seen == [NavEventType.MOVE]


def test_off_removes_listener() -> None:
    emitter = NavEventEmitter()
    seen: List[int] = []

    def listener(event: NavEvent) -> None:
        seen.append(1)

    emitter.on(NavEventType.END, listener)
    emitter.off(NavEventType.END, listener)
    emitter.off(NavEventType.PAUSE, listener)

    emitter.emit(NavEventType.END)
    assert seen == []


def test_failing_listener_does_not_block_others_or_cancel() -> None:
    emitter = NavEventEmitter()
    seen: List[str] = []

    def broken(event: NavEvent) -> None:
        raise RuntimeError("boom")

    emitter.on(NavEventType.MOVE, broken)
    emitter.on(NavEventType.MOVE, lambda e: seen.append("ok"))

    assert emitter.emit(NavEventType.MOVE) is True
    assert seen == ["ok"]
