# A* pathfinding over NavGrid
# src/bot_core/nav/pathfinder.py
"""
A* pathfinding over NavGrid.

- Manhattan heuristic on 4-connected grids, Euclidean on 8-connected ones.
- Edge weights come from NavGrid.step_cost.
- Equal-priority frontier entries pop most-recently-discovered first, so
  results are reproducible for a given grid and (start, goal).
- Optional max_steps guard for very large maps.

The search writes its bookkeeping (g, closed, parent) onto the grid cells.
Callers must run grid.reset() before every search.
"""

from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .grid import GridCell, NavGrid


@dataclass
class PathfindingResult:
    """Structured result for a pathfinding attempt."""

    path: List[GridCell]
    success: bool
    reason: str | None = None

    @property
    def unreachable(self) -> bool:
        return not self.success


def _heuristic(grid: NavGrid, a: GridCell, b: GridCell) -> float:
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    if grid.diagonal:
        return math.hypot(dx, dy)
    return float(dx + dy)


def find_path(
    grid: NavGrid,
    start: GridCell,
    goal: GridCell,
    max_steps: Optional[int] = None,
) -> PathfindingResult:
    """
    A* search for a path from start to goal on NavGrid.

    Returns a PathfindingResult with:
      - path: cells from start (exclusive) to goal (inclusive)
      - success: False when the goal cannot be reached
      - reason: if not success, a short machine-readable explanation

    start == goal is a successful search with an empty path. The start cell
    is expanded even when it is not walkable (the agent is standing there).
    """
    if start is goal:
        return PathfindingResult(path=[], success=True)

    if not goal.walkable:
        return PathfindingResult(path=[], success=False, reason="goal_blocked")

    # Entries are (f, -seq, cell): lower f first, then newest discovery.
    counter = itertools.count()
    open_heap: List[Tuple[float, int, GridCell]] = []

    start.g = 0.0
    start.parent = None
    heapq.heappush(open_heap, (_heuristic(grid, start, goal), -next(counter), start))

    steps = 0

    while open_heap:
        if max_steps is not None and steps >= max_steps:
            return PathfindingResult(path=[], success=False, reason="max_steps_exhausted")

        _, _, current = heapq.heappop(open_heap)
        if current.closed:
            # stale entry superseded by a cheaper one
            continue
        current.closed = True
        steps += 1

        if current is goal:
            return PathfindingResult(path=_reconstruct_path(current), success=True)

        for nxt in grid.neighbors(current):
            if nxt.closed:
                continue

            tentative_g = current.g + grid.step_cost(current, nxt)
            if tentative_g < nxt.g:
                nxt.g = tentative_g
                nxt.parent = current
                f_score = tentative_g + _heuristic(grid, nxt, goal)
                heapq.heappush(open_heap, (f_score, -next(counter), nxt))

    return PathfindingResult(path=[], success=False, reason="no_path_found")


def _reconstruct_path(goal: GridCell) -> List[GridCell]:
    """Walk parent links back to the start; the start itself is dropped."""
    path: List[GridCell] = []
    current: Optional[GridCell] = goal
    while current is not None and current.parent is not None:
        path.append(current)
        current = current.parent
    path.reverse()
    return path
