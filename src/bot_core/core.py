# src/bot_core/core.py
"""
NavBot: one local player, its room view and its movement controller.

The transport is injected as a PacketClient. NavBot only adds lifecycle
(connect / disconnect / pump) on top; everything navigation-related is
reached through `bot.nav`, everything room-related through `bot.room`.

Transport failures surface as BotCoreError. Navigation problems never do:
the controller logs them and reports them through its events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from env.schema import NavConfig
from monitoring.bus import EventBus

from .nav import GridCache, MovementController
from .net import PacketClient
from .room_tracker import RoomTracker

log = logging.getLogger(__name__)


@dataclass
class BotCoreError(RuntimeError):
    """Transport failure; `code` is one of connect_failed, disconnect_failed, pump_failed."""

    code: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"BotCoreError(code={self.code!r}, details={self.details!r})"


def _wrap(code: str, exc: Exception) -> BotCoreError:
    return BotCoreError(code=code, details={"exception": repr(exc)})


class NavBot:
    def __init__(
        self,
        client: PacketClient,
        grids: GridCache,
        *,
        config: Optional[NavConfig] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._client = client
        self._room = RoomTracker(client)
        self._nav = MovementController(self._room, grids, config, bus=bus)
        self._connected = False

    @property
    def room(self) -> RoomTracker:
        return self._room

    @property
    def nav(self) -> MovementController:
        return self._nav

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        """Open the transport. A second call is a no-op."""
        if self._connected:
            return
        try:
            self._client.connect()
        except Exception as exc:
            raise _wrap("connect_failed", exc) from exc
        self._connected = True
        log.info("NavBot connected")

    def disconnect(self) -> None:
        """
        Stop any navigation (emitting the usual stop notification), then
        close the transport. The bot counts as disconnected even when the
        transport fails to close.
        """
        if not self._connected:
            return

        if self._nav.destination is not None:
            self._nav.stop()

        self._connected = False
        try:
            self._client.disconnect()
        except Exception as exc:
            raise _wrap("disconnect_failed", exc) from exc
        log.info("NavBot disconnected")

    def pump(self) -> None:
        """Let the transport dispatch pending packets; each fixed_update ticks the controller."""
        if not self._connected:
            return
        try:
            self._client.tick()
        except Exception as exc:
            raise _wrap("pump_failed", exc) from exc

    def __enter__(self) -> "NavBot":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disconnect()
