# bot_core.net package
# src/bot_core/net/__init__.py
"""
Network seam for bot_core.

Only the PacketClient protocol lives here; concrete transports are
supplied by the embedding application (tests use
bot_core.testing.fakes.FakePacketClient).
"""

from __future__ import annotations

from .client import PacketClient, PacketHandler

__all__ = [
    "PacketClient",
    "PacketHandler",
]
