# tests/test_room_tracker.py
"""
Tests for bot_core.room_tracker.RoomTracker.

Covers:
- room / player packets update tracked state
- malformed packets are dropped
- listeners for fixed_update / player_move / player_leave
- move() actuator sends a move packet without re-firing player_move
"""

from __future__ import annotations

from typing import Any, List

import pytest

from bot_core.room_tracker import PlayerState, RoomTracker
from bot_core.testing.fakes import FakePacketClient, join_room


def make_room():
    client = FakePacketClient()
    room = RoomTracker(client)
    return client, room


def test_join_populates_local_player() -> None:
    client, room = make_room()

    join_room(client, map_id=3, player_id=7, position=(1.5, 2.5), player_speed=2.0)

    assert room.map_id == 3
    assert room.player_speed == 2.0
    assert room.me == PlayerState(player_id=7, position=(1.5, 2.5))
    assert room.local_position == (1.5, 2.5)
    assert room.is_local(room.me)


def test_local_player_without_spawn_has_no_position() -> None:
    client, room = make_room()

    client.emit("local_player", {"player_id": 1})

    assert room.me is not None
    assert not room.me.spawned
    assert room.local_position is None


def test_malformed_packets_are_ignored() -> None:
    client, room = make_room()
    join_room(client)

    client.emit("spawn_player", {"player_id": "abc", "x": 1, "y": 1})
    client.emit("spawn_player", {"player_id": 2, "x": "east"})
    client.emit("player_move", {"x": 1, "y": 1})
    client.emit("room_settings", {"player_speed": "fast"})

    assert [p.player_id for p in room.players()] == [1]
    assert room.player_speed == 1.0
    assert room.map_id == "test"


@pytest.mark.parametrize("bad", ["nan", "inf", float("-inf")])
def test_non_finite_coordinates_are_dropped(bad: Any) -> None:
    client, room = make_room()
    join_room(client, position=(2.0, 3.0))
    seen: List[Any] = []
    room.on("player_move", lambda player, pos: seen.append(pos))

    client.emit("player_move", {"player_id": 1, "x": bad, "y": 0})
    client.emit("spawn_player", {"player_id": 2, "x": 0, "y": bad})

    assert seen == []
    assert room.local_position == (2.0, 3.0)
    assert room.resolve_player(2) is None


def test_player_move_fires_listeners() -> None:
    client, room = make_room()
    join_room(client)
    seen: List[Any] = []
    room.on("player_move", lambda player, pos: seen.append((player.player_id, pos)))

    client.emit("spawn_player", {"player_id": 2, "x": 0, "y": 0})
    client.emit("player_move", {"player_id": 2, "x": 3, "y": 4})
    client.emit("player_move", {"player_id": 9, "x": 1, "y": 1})

    assert seen == [(2, (3.0, 4.0)), (9, (1.0, 1.0))]
    assert room.resolve_player(9).position == (1.0, 1.0)


def test_player_leave_removes_and_fires() -> None:
    client, room = make_room()
    join_room(client)
    left: List[int] = []
    room.on("player_leave", lambda player: left.append(player.player_id))

    client.emit("spawn_player", {"player_id": 2, "x": 0, "y": 0})
    client.emit("player_leave", {"player_id": 2})
    client.emit("player_leave", {"player_id": 2})

    assert left == [2]
    assert room.resolve_player(2) is None


def test_local_player_leaving_clears_me() -> None:
    client, room = make_room()
    join_room(client)

    client.emit("player_leave", {"player_id": 1})

    assert room.me is None
    assert room.local_position is None


def test_fixed_update_fires_listeners() -> None:
    client, room = make_room()
    ticks: List[int] = []
    room.on("fixed_update", lambda: ticks.append(1))

    client.emit("fixed_update")
    client.emit("fixed_update")

    assert len(ticks) == 2


def test_failing_listener_does_not_stop_others() -> None:
    client, room = make_room()
    ticks: List[int] = []

    def broken() -> None:
        raise RuntimeError("boom")

    room.on("fixed_update", broken)
    room.on("fixed_update", lambda: ticks.append(1))
    client.emit("fixed_update")

    assert ticks == [1]


def test_unknown_listener_event_rejected() -> None:
    _, room = make_room()
    with pytest.raises(ValueError):
        room.on("chat", lambda *a: None)


def test_off_removes_listener() -> None:
    client, room = make_room()
    ticks: List[int] = []

    def handler() -> None:
        ticks.append(1)

    room.on("fixed_update", handler)
    room.off("fixed_update", handler)
    client.emit("fixed_update")

    assert ticks == []


def test_resolve_player_accepts_ids_and_states() -> None:
    client, room = make_room()
    join_room(client)

    assert room.resolve_player(1) is room.me
    assert room.resolve_player(PlayerState(player_id=1)) is room.me
    assert room.resolve_player(True) is None
    assert room.resolve_player("1") is None


def test_move_updates_position_and_sends_packet() -> None:
    client, room = make_room()
    join_room(client, player_id=4)
    moves: List[Any] = []
    room.on("player_move", lambda player, pos: moves.append(pos))

    room.move((2, 3), (0.5, 0.25))

    assert room.local_position == (2.0, 3.0)
    assert moves == []
    sent = client.sent_of_type("move")
    assert len(sent) == 1
    assert sent[0].data == {"player_id": 4, "x": 2.0, "y": 3.0, "vx": 0.5, "vy": 0.25}


def test_move_without_local_player_is_ignored() -> None:
    client, room = make_room()

    room.move((1.0, 1.0), (1.0, 1.0))

    assert client.sent_packets == []
