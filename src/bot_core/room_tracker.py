# track players / map and act as the movement actuator
# src/bot_core/room_tracker.py
"""
Room tracker for bot_core.

Consumes normalized packets from a PacketClient and maintains the small
amount of room state navigation needs: current map, player speed, who the
local player is and where every spawned player stands. It also owns the
outgoing side of movement (move()).

Normalized packet types:

    - "room_settings"  → {"map_id", "player_speed"}
    - "local_player"   → {"player_id"}
    - "spawn_player"   → {"player_id", "x", "y"}
    - "player_move"    → {"player_id", "x", "y"}
    - "player_leave"   → {"player_id"}
    - "fixed_update"   → {} (one simulation step)

Listeners registered with on() receive:

    - "fixed_update"  → handler()
    - "player_move"   → handler(player, (x, y))  (externally reported moves only)
    - "player_leave"  → handler(player)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Tuple

from .net import PacketClient

log = logging.getLogger(__name__)

Vec2 = Tuple[float, float]

ROOM_EVENTS = ("fixed_update", "player_move", "player_leave")


@dataclass
class PlayerState:
    """Minimal tracked state for one player in the room."""

    player_id: int
    position: Optional[Vec2] = None

    @property
    def spawned(self) -> bool:
        return self.position is not None


class RoomTracker:
    """
    Maintains room state from packets and fans out room events.

    Malformed packets are dropped silently; the room keeps its last good
    state.
    """

    def __init__(self, client: PacketClient, *, player_speed: float = 1.0) -> None:
        self._client = client

        self._map_id: Optional[Hashable] = None
        self._player_speed: float = player_speed
        self._local_id: Optional[int] = None
        self._players: Dict[int, PlayerState] = {}

        self._listeners: Dict[str, List[Callable[..., None]]] = {
            name: [] for name in ROOM_EVENTS
        }

        self._register_handlers()

    # ------------------------------------------------------------------
    # Packet wiring
    # ------------------------------------------------------------------

    def _register_handlers(self) -> None:
        self._client.on_packet("room_settings", self._handle_room_settings)
        self._client.on_packet("local_player", self._handle_local_player)
        self._client.on_packet("spawn_player", self._handle_spawn_player)
        self._client.on_packet("player_move", self._handle_player_move)
        self._client.on_packet("player_leave", self._handle_player_leave)
        self._client.on_packet("fixed_update", self._handle_fixed_update)

    # ------------------------------------------------------------------
    # Packet handlers
    # ------------------------------------------------------------------

    def _handle_room_settings(self, pkt: Mapping[str, Any]) -> None:
        if "map_id" in pkt:
            self._map_id = pkt["map_id"]
        if "player_speed" in pkt:
            try:
                self._player_speed = float(pkt["player_speed"])
            except (TypeError, ValueError):
                pass

    def _handle_local_player(self, pkt: Mapping[str, Any]) -> None:
        player_id = _parse_id(pkt)
        if player_id is None:
            return
        self._local_id = player_id
        self._players.setdefault(player_id, PlayerState(player_id=player_id))

    def _handle_spawn_player(self, pkt: Mapping[str, Any]) -> None:
        player_id = _parse_id(pkt)
        position = _parse_position(pkt)
        if player_id is None or position is None:
            return
        player = self._players.setdefault(player_id, PlayerState(player_id=player_id))
        player.position = position

    def _handle_player_move(self, pkt: Mapping[str, Any]) -> None:
        player_id = _parse_id(pkt)
        position = _parse_position(pkt)
        if player_id is None or position is None:
            return
        player = self._players.get(player_id)
        if player is None:
            # first sighting counts as a spawn
            player = PlayerState(player_id=player_id)
            self._players[player_id] = player
        player.position = position
        self._fire("player_move", player, position)

    def _handle_player_leave(self, pkt: Mapping[str, Any]) -> None:
        player_id = _parse_id(pkt)
        if player_id is None:
            return
        player = self._players.pop(player_id, None)
        if player is None:
            return
        if player_id == self._local_id:
            self._local_id = None
        self._fire("player_leave", player)

    def _handle_fixed_update(self, pkt: Mapping[str, Any]) -> None:
        self._fire("fixed_update")

    # ------------------------------------------------------------------
    # Listener registry
    # ------------------------------------------------------------------

    def on(self, event: str, handler: Callable[..., None]) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown room event {event!r}")
        self._listeners[event].append(handler)

    def off(self, event: str, handler: Callable[..., None]) -> None:
        handlers = self._listeners.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def _fire(self, event: str, *args: Any) -> None:
        for handler in list(self._listeners[event]):
            try:
                handler(*args)
            except Exception:
                log.exception("Room listener failed for %s", event)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def map_id(self) -> Optional[Hashable]:
        return self._map_id

    @property
    def player_speed(self) -> float:
        return self._player_speed

    @property
    def me(self) -> Optional[PlayerState]:
        if self._local_id is None:
            return None
        return self._players.get(self._local_id)

    @property
    def local_position(self) -> Optional[Vec2]:
        me = self.me
        return me.position if me is not None else None

    def is_local(self, player: PlayerState) -> bool:
        return self._local_id is not None and player.player_id == self._local_id

    def players(self) -> List[PlayerState]:
        return list(self._players.values())

    def resolve_player(self, ref: Any) -> Optional[PlayerState]:
        """Resolve a player id or PlayerState to the tracked PlayerState."""
        if isinstance(ref, PlayerState):
            return self._players.get(ref.player_id)
        if isinstance(ref, bool):
            return None
        if isinstance(ref, int):
            return self._players.get(ref)
        return None

    def move(self, position: Vec2, velocity: Vec2) -> None:
        """
        Move the local player toward `position` with `velocity`.

        Updates the tracked position right away and sends a "move" packet.
        Does not fire "player_move"; listeners only hear about moves the
        room reports.
        """
        me = self.me
        if me is None:
            log.debug("move() ignored: local player not in room")
            return

        me.position = (float(position[0]), float(position[1]))
        self._client.send_packet(
            "move",
            {
                "player_id": me.player_id,
                "x": me.position[0],
                "y": me.position[1],
                "vx": float(velocity[0]),
                "vy": float(velocity[1]),
            },
        )


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _parse_id(pkt: Mapping[str, Any]) -> Optional[int]:
    try:
        return int(pkt["player_id"])
    except (KeyError, TypeError, ValueError):
        return None


def _parse_position(pkt: Mapping[str, Any]) -> Optional[Vec2]:
    try:
        x, y = float(pkt["x"]), float(pkt["y"])
    except (KeyError, TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return (x, y)


__all__ = ["PlayerState", "RoomTracker"]
