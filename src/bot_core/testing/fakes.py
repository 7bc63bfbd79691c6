# src/bot_core/testing/fakes.py
"""
Test helpers for bot_core.

Provides:
- FakePacketClient: in-memory PacketClient for unit tests and demos.
- join_room(): the packet sequence that puts a local player into a room.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Mapping, Tuple

from ..net import PacketClient, PacketHandler


@dataclass
class SentPacket:
    """One packet the code under test sent through FakePacketClient."""

    packet_type: str
    data: Dict[str, Any]


class FakePacketClient(PacketClient):
    """
    In-memory room transport.

    - emit() delivers an incoming packet immediately.
    - queue() holds it until the next tick(), like a real transport that
      only dispatches while being pumped.
    - Outgoing packets are recorded in `sent_packets`.
    """

    def __init__(self) -> None:
        self.connected: bool = False
        self.ticks: int = 0
        self.sent_packets: List[SentPacket] = []
        self._handlers: Dict[str, PacketHandler] = {}
        self._inbox: Deque[Tuple[str, Mapping[str, Any]]] = deque()

    def connect(self) -> None:
        self.connected = True

    def disconnect(self) -> None:
        self.connected = False

    def tick(self) -> None:
        self.ticks += 1
        while self._inbox:
            packet_type, payload = self._inbox.popleft()
            self.emit(packet_type, payload)

    def send_packet(self, packet_type: str, data: Mapping[str, Any]) -> None:
        self.sent_packets.append(SentPacket(packet_type=packet_type, data=dict(data)))

    def on_packet(self, packet_type: str, handler: PacketHandler) -> None:
        self._handlers[packet_type] = handler

    # ------------------------------------------------------------------
    # Test-only helpers
    # ------------------------------------------------------------------

    def emit(self, packet_type: str, payload: Mapping[str, Any] | None = None) -> None:
        """Deliver an incoming packet to its handler now, if one is registered."""
        handler = self._handlers.get(packet_type)
        if handler is not None:
            handler(payload or {})

    def queue(self, packet_type: str, payload: Mapping[str, Any] | None = None) -> None:
        """Hold an incoming packet until the next tick()."""
        self._inbox.append((packet_type, payload or {}))

    @property
    def pending(self) -> int:
        return len(self._inbox)

    def sent_of_type(self, packet_type: str) -> List[SentPacket]:
        return [p for p in self.sent_packets if p.packet_type == packet_type]


def join_room(
    client: FakePacketClient,
    *,
    map_id: Any = "test",
    player_id: int = 1,
    position: tuple[float, float] = (0.0, 0.0),
    player_speed: float = 1.0,
) -> None:
    """Emit room_settings, local_player and spawn_player for the local player."""
    client.emit("room_settings", {"map_id": map_id, "player_speed": player_speed})
    client.emit("local_player", {"player_id": player_id})
    client.emit("spawn_player", {"player_id": player_id, "x": position[0], "y": position[1]})
