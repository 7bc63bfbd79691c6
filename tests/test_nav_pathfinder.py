# tests/test_nav_pathfinder.py
"""
Unit tests for the A* pathfinder.

Worlds are built from small ASCII maps so no baked grid data is required.
"""

from __future__ import annotations

import random
from collections import deque
from typing import Dict, List, Optional

import pytest

from bot_core.nav import Coord, GridCell, NavGrid, find_path, grid_from_ascii


OPEN_5X5 = """
.....
.....
.....
.....
.....
"""

# Column x=2 blocked on rows 0..3; the only way across is row 4.
WALL_5X5 = """
..#..
..#..
..#..
..#..
.....
"""

# (0,0)-(1,1) pocket sealed off by blocked cells.
SEALED_5X5 = """
..#..
..#..
###..
.....
.....
"""


def coords(path: List[GridCell]) -> List[Coord]:
    return [c.coord for c in path]


def search(grid: NavGrid, start: Coord, goal: Coord, **kwargs):
    grid.reset()
    return find_path(grid, grid.cell_at(*start), grid.cell_at(*goal), **kwargs)


def bfs_distance(grid: NavGrid, start: Coord, goal: Coord) -> Optional[int]:
    """Reference shortest step count on a uniform-cost 4-connected grid."""
    seen: Dict[Coord, int] = {start: 0}
    queue = deque([start])
    while queue:
        cur = queue.popleft()
        if cur == goal:
            return seen[cur]
        for nxt in grid.neighbors(grid.cell_at(*cur)):
            if nxt.coord not in seen:
                seen[nxt.coord] = seen[cur] + 1
                queue.append(nxt.coord)
    return None


def assert_adjacent_chain(start: Coord, path: List[Coord], diagonal: bool = False) -> None:
    prev = start
    for cur in path:
        dx, dy = abs(cur[0] - prev[0]), abs(cur[1] - prev[1])
        if diagonal:
            assert max(dx, dy) == 1, (prev, cur)
        else:
            assert dx + dy == 1, (prev, cur)
        prev = cur


def test_find_path_in_open_space() -> None:
    grid = grid_from_ascii(OPEN_5X5)

    result = search(grid, (0, 0), (4, 4))

    assert result.success
    assert result.reason is None
    path = coords(result.path)
    assert len(path) == 8
    assert path[-1] == (4, 4)
    assert (0, 0) not in path
    # shortest path on an open grid never backtracks
    for (ax, ay), (bx, by) in zip([(0, 0)] + path, path):
        assert bx >= ax and by >= ay
    assert_adjacent_chain((0, 0), path)


def test_find_path_around_wall() -> None:
    grid = grid_from_ascii(WALL_5X5)

    result = search(grid, (0, 0), (4, 4))

    assert result.success
    path = coords(result.path)
    assert len(path) == 8
    assert (2, 4) in path
    for x, y in path:
        assert grid.is_walkable(x, y)
    assert_adjacent_chain((0, 0), path)


def test_find_path_detour_to_same_row() -> None:
    grid = grid_from_ascii(WALL_5X5)

    result = search(grid, (0, 0), (4, 0))

    assert result.success
    assert len(result.path) == 12
    assert (2, 4) in coords(result.path)


def test_start_equals_goal_is_trivial_success() -> None:
    grid = grid_from_ascii(OPEN_5X5)

    result = search(grid, (2, 2), (2, 2))

    assert result.success
    assert result.path == []
    assert not result.unreachable


def test_unreachable_goal_is_distinguished_from_trivial() -> None:
    grid = grid_from_ascii(SEALED_5X5)

    result = search(grid, (4, 4), (0, 0))

    assert not result.success
    assert result.unreachable
    assert result.path == []
    assert result.reason == "no_path_found"


def test_blocked_goal_reports_reason() -> None:
    grid = grid_from_ascii(WALL_5X5)

    result = search(grid, (0, 0), (2, 1))

    assert not result.success
    assert result.path == []
    assert result.reason == "goal_blocked"


def test_blocked_start_still_expands() -> None:
    grid = grid_from_ascii(WALL_5X5)

    result = search(grid, (2, 0), (4, 0))

    assert result.success
    assert coords(result.path) == [(3, 0), (4, 0)]


def test_max_steps_exhaustion() -> None:
    grid = grid_from_ascii(SEALED_5X5)

    result = search(grid, (4, 4), (0, 0), max_steps=3)

    assert not result.success
    assert result.reason == "max_steps_exhausted"
    assert result.path == []


def test_search_is_deterministic_after_reset() -> None:
    grid = grid_from_ascii(OPEN_5X5)

    first = coords(search(grid, (0, 0), (4, 4)).path)
    second = coords(search(grid, (0, 0), (4, 4)).path)
    other = coords(search(grid_from_ascii(OPEN_5X5), (0, 0), (4, 4)).path)

    assert first == second == other


def test_equal_cost_ties_expand_latest_discovered_first() -> None:
    grid = grid_from_ascii(OPEN_5X5)

    path = coords(search(grid, (0, 0), (4, 4)).path)

    # (0, 1) is pushed after (1, 0), so it wins the first tie and the
    # search keeps following the newest frontier cell.
    assert path == [(0, 1), (0, 2), (0, 3), (0, 4), (1, 4), (2, 4), (3, 4), (4, 4)]


def test_weighted_cells_are_avoided() -> None:
    grid = grid_from_ascii(
        """
        .....
        .999.
        .....
        """
    )

    result = search(grid, (0, 1), (4, 1))

    assert result.success
    assert all(c.cost == 1 for c in result.path)
    assert len(result.path) == 6


def test_diagonal_grid_cuts_across() -> None:
    grid = grid_from_ascii(OPEN_5X5, diagonal=True)

    result = search(grid, (0, 0), (4, 4))

    assert result.success
    assert coords(result.path) == [(1, 1), (2, 2), (3, 3), (4, 4)]


def test_diagonal_grid_does_not_cut_corners() -> None:
    grid = grid_from_ascii(
        """
        .#
        ..
        """,
        diagonal=True,
    )

    result = search(grid, (0, 0), (1, 1))

    assert coords(result.path) == [(0, 1), (1, 1)]


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
def test_paths_are_adjacent_and_shortest_on_random_maps(seed: int) -> None:
    rng = random.Random(seed)
    width, height = 9, 7
    rows = [
        "".join("#" if rng.random() < 0.25 else "." for _ in range(width))
        for _ in range(height)
    ]
    grid = grid_from_ascii("\n".join(rows))
    walkable = [c.coord for c in grid if c.walkable]

    for _ in range(20):
        start = rng.choice(walkable)
        goal = rng.choice(walkable)
        result = search(grid, start, goal)
        expected = bfs_distance(grid, start, goal)

        if expected is None:
            assert not result.success
            assert result.path == []
            continue

        assert result.success
        path = coords(result.path)
        assert len(path) == expected
        if path:
            assert path[-1] == goal
        assert start not in path
        assert_adjacent_chain(start, path)
