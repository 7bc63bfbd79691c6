#!/usr/bin/env python3
"""
tools/nav_demo.py

Offline navigation demo.

- Builds a grid from an ASCII map (no binary file needed)
- Joins a fake room through FakePacketClient
- Sends the local player to a position or a configured vent
- Drives fixed-update ticks until arrival (or --ticks runs out)
- Renders the map and the walked trail with rich

Examples:
    python tools/nav_demo.py --to 17 9
    python tools/nav_demo.py --vent storage --diagonal --log logs/nav/demo.jsonl
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Set, Tuple

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path when running as a script
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from rich.console import Console  # noqa: E402
from rich.table import Table  # noqa: E402
from rich.text import Text  # noqa: E402

from app import configure_logging, create_nav_runtime  # type: ignore[import]  # noqa: E402
from bot_core.nav import GridCache, NavEvent, NavEventType, NavGrid, grid_from_ascii  # type: ignore[import]  # noqa: E402
from bot_core.testing.fakes import FakePacketClient, join_room  # type: ignore[import]  # noqa: E402
from env.loader import load_nav_config  # type: ignore[import]  # noqa: E402

MAP_ID = "demo"


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the movement controller on an ASCII map.")
    parser.add_argument("--map", type=Path, default=ROOT / "data" / "maps" / "demo.txt")
    parser.add_argument("--start", type=float, nargs=2, default=(0.0, 0.0), metavar=("X", "Y"))
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--to", type=float, nargs=2, metavar=("X", "Y"))
    target.add_argument("--vent", type=str, help="Vent id from config/nav.yaml (map 'demo')")
    parser.add_argument("--ticks", type=int, default=2000, help="Upper bound on fixed updates")
    parser.add_argument("--diagonal", action="store_true")
    parser.add_argument("--log", type=Path, default=None, help="JSONL monitoring log path")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def render(grid: NavGrid, trail: Set[Tuple[int, int]], start: Tuple[int, int], goal: Tuple[int, int]) -> Table:
    table = Table.grid(padding=0)
    for _ in range(grid.width):
        table.add_column(no_wrap=True)

    for y in range(grid.height):
        row: List[Text] = []
        for x in range(grid.width):
            cell = grid.cell_at(x, y)
            assert cell is not None
            if (x, y) == start:
                row.append(Text("S", style="bold green"))
            elif (x, y) == goal:
                row.append(Text("G", style="bold red"))
            elif (x, y) in trail:
                row.append(Text("*", style="yellow"))
            elif not cell.walkable:
                row.append(Text("#", style="dim"))
            elif cell.cost > 1:
                row.append(Text(str(cell.cost), style="blue"))
            else:
                row.append(Text("."))
        table.add_row(*row)
    return table


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    console = Console()

    config = load_nav_config()
    config.diagonal = args.diagonal or config.diagonal

    grid = grid_from_ascii(args.map.read_text(encoding="utf-8"), diagonal=config.diagonal)
    grids = GridCache(lambda _map_id: grid.to_bytes(), diagonal=config.diagonal)

    client = FakePacketClient()
    runtime = create_nav_runtime(client, config=config, grids=grids, log_path=args.log)
    bot = runtime.bot
    bot.connect()
    join_room(client, map_id=MAP_ID, position=(args.start[0], args.start[1]))

    trail: Set[Tuple[int, int]] = set()
    arrived: List[bool] = []

    def on_move(event: NavEvent) -> None:
        x, y = event.data["position"]
        trail.add((int(round(x)), int(round(y))))

    def on_stop(event: NavEvent) -> None:
        arrived.append(bool(event.data["reached"]))

    bot.nav.events.on(NavEventType.MOVE, on_move)
    bot.nav.events.on(NavEventType.STOP, on_stop)

    if args.vent is not None:
        if not bot.nav.go_to_vent(args.vent):
            console.print(f"[red]Unknown vent {args.vent!r} for map {MAP_ID!r}[/red]")
            runtime.close()
            return 1
    else:
        bot.nav.go((args.to[0], args.to[1]))

    destination = bot.nav.destination
    assert destination is not None

    ticks = 0
    while ticks < args.ticks and not arrived:
        client.emit("fixed_update", {})
        bot.pump()
        ticks += 1

    loaded = bot.nav.grid or grid
    start_cell = loaded.nearest_cell(args.start[0], args.start[1]).coord
    goal_cell = loaded.nearest_cell(destination[0], destination[1]).coord
    console.print(render(loaded, trail, start_cell, goal_cell))

    if arrived and arrived[-1]:
        console.print(f"[green]Arrived[/green] after {ticks} ticks, {len(trail)} moves.")
        status = 0
    else:
        console.print(f"[yellow]Did not arrive[/yellow] within {ticks} ticks.")
        status = 2

    runtime.close()
    return status


if __name__ == "__main__":
    sys.exit(main())
