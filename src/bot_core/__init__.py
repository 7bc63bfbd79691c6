# bot_core package
# src/bot_core/__init__.py
"""
bot_core package.

Exports:
    - NavBot: transport + room tracker + movement controller for one player
    - BotCoreError: domain-level error type for transport failures
    - RoomTracker / PlayerState: room state consumed by navigation
"""

from __future__ import annotations

from .core import BotCoreError, NavBot
from .room_tracker import PlayerState, RoomTracker

__all__ = [
    "NavBot",
    "BotCoreError",
    "RoomTracker",
    "PlayerState",
]
