# src/app/runtime.py
"""
Runtime wiring for the navigation bot.

create_nav_runtime() assembles everything a host application needs around
a PacketClient:

    - NavConfig (config/nav.yaml unless given)
    - GridCache reading per-map grid files (announces GRID_LOADED)
    - NavBot (room tracker + movement controller)
    - EventBus, NavCommandController and an optional JSONL event log
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Iterable, Optional

from bot_core import NavBot
from bot_core.nav import GridCache, NavGrid, directory_loader
from bot_core.net import PacketClient
from env.loader import load_nav_config, resolve_grid_dir
from env.schema import NavConfig
from monitoring.bus import EventBus
from monitoring.controller import NavCommandController
from monitoring.events import EventType
from monitoring.logger import JsonFileLogger, log_event


@dataclass
class NavRuntime:
    """Everything built by create_nav_runtime(); close() at shutdown."""

    bot: NavBot
    bus: EventBus
    commands: NavCommandController
    sink: Optional[JsonFileLogger] = None

    def close(self) -> None:
        self.commands.close()
        if self.sink is not None:
            self.sink.close()
        self.bot.disconnect()


def build_grid_cache(config: NavConfig, bus: Optional[EventBus] = None) -> GridCache:
    """GridCache over config.grid_data_dir, publishing GRID_LOADED on the bus."""

    def _announce(map_id: Hashable, grid: NavGrid) -> None:
        if bus is None:
            return
        log_event(
            bus=bus,
            module="bot_core.nav.cache",
            event_type=EventType.GRID_LOADED,
            message=f"Loaded grid for map {map_id!r}",
            payload={
                "map_id": str(map_id),
                "width": grid.width,
                "height": grid.height,
                "cell_size": grid.cell_size,
                "diagonal": grid.diagonal,
            },
        )

    return GridCache(
        directory_loader(resolve_grid_dir(config)),
        diagonal=config.diagonal,
        on_loaded=_announce,
    )


def create_nav_runtime(
    client: PacketClient,
    *,
    config: Optional[NavConfig] = None,
    grids: Optional[GridCache] = None,
    bus: Optional[EventBus] = None,
    log_path: Optional[Path] = None,
    log_event_types: Optional[Iterable[EventType]] = None,
) -> NavRuntime:
    """
    Wire config, grid cache, bot and monitoring around `client`.

    With `log_path`, bus events (optionally only `log_event_types`) are
    appended to that JSONL file.
    """
    config = config or load_nav_config()
    bus = bus or EventBus()
    sink = JsonFileLogger(log_path, bus, event_types=log_event_types) if log_path is not None else None
    grids = grids or build_grid_cache(config, bus)

    bot = NavBot(client, grids, config=config, bus=bus)
    commands = NavCommandController(bot.nav, bus)

    return NavRuntime(bot=bot, bus=bus, commands=commands, sink=sink)
