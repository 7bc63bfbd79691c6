# room transport abstraction
# src/bot_core/net/client.py
"""
PacketClient: the seam between the navigation runtime and the game client.

Whatever speaks the real protocol (websocket, IPC bridge, replay file)
implements this protocol and hands over already-decoded packets as plain
mappings. Packet types consumed by the room tracker:

    room_settings, local_player, spawn_player, player_move,
    player_leave, fixed_update

Packet types produced by the room tracker:

    move  {player_id, x, y, vx, vy}
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol

# Called with the decoded payload of one incoming packet.
PacketHandler = Callable[[Mapping[str, Any]], None]


class PacketClient(Protocol):
    """Room-level transport. One handler per packet type."""

    def connect(self) -> None:
        """Open the transport and join the room."""
        ...

    def disconnect(self) -> None:
        """Leave the room; no handler is called afterwards."""
        ...

    def tick(self) -> None:
        """
        Deliver queued incoming packets to their handlers.

        Hosts call this from their main loop; fixed_update packets delivered
        here are what advance the movement controller.
        """
        ...

    def send_packet(self, packet_type: str, data: Mapping[str, Any]) -> None:
        """Encode and send one outgoing packet."""
        ...

    def on_packet(self, packet_type: str, handler: PacketHandler) -> None:
        """Register (or replace) the handler for `packet_type`."""
        ...
