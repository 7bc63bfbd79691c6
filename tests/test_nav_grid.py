# tests/test_nav_grid.py
"""
Unit tests for NavGrid.

Covers:
- binary load / to_bytes
- malformed payload rejection
- nearest_cell clamping and world_position mapping
- 4- and 8-connected neighbors (no corner cutting)
- reset of per-search bookkeeping
- ASCII map building
"""

from __future__ import annotations

import math

import pytest

from bot_core.nav import GridCell, MalformedGridData, NavGrid, find_path, grid_from_ascii
from bot_core.nav.grid import HEADER, MAGIC, SQRT2


OPEN_3X3 = """
...
...
...
"""


def test_load_parses_header_and_cells() -> None:
    source = grid_from_ascii(
        """
        .#3
        ..9
        """,
        cell_size=0.5,
        origin=(-3.0, 2.0),
        diagonal=True,
    )

    grid = NavGrid.load(source.to_bytes())

    assert (grid.width, grid.height) == (3, 2)
    assert grid.cell_size == 0.5
    assert grid.origin == (-3.0, 2.0)
    assert grid.diagonal is True
    assert [c.cost for c in grid] == [1, 0, 3, 1, 1, 9]
    assert not grid.cell_at(1, 0).walkable
    assert grid.cell_at(2, 1).coord == (2, 1)


def test_load_diagonal_override() -> None:
    data = grid_from_ascii(OPEN_3X3, diagonal=True).to_bytes()
    assert NavGrid.load(data, diagonal=False).diagonal is False


def test_load_rejects_payload_length_mismatch() -> None:
    data = grid_from_ascii(OPEN_3X3).to_bytes()

    with pytest.raises(MalformedGridData):
        NavGrid.load(data[:-1])
    with pytest.raises(MalformedGridData):
        NavGrid.load(data + b"\x01")


def test_load_rejects_short_or_foreign_data() -> None:
    with pytest.raises(MalformedGridData):
        NavGrid.load(b"NGRD")

    bad_magic = HEADER.pack(b"XXXX", 1, 0, 1, 1, 1.0, 0.0, 0.0) + b"\x01"
    with pytest.raises(MalformedGridData):
        NavGrid.load(bad_magic)

    bad_version = HEADER.pack(MAGIC, 7, 0, 1, 1, 1.0, 0.0, 0.0) + b"\x01"
    with pytest.raises(MalformedGridData):
        NavGrid.load(bad_version)


def test_load_rejects_empty_dimensions_and_bad_cell_size() -> None:
    with pytest.raises(MalformedGridData):
        NavGrid.load(HEADER.pack(MAGIC, 1, 0, 0, 3, 1.0, 0.0, 0.0))

    with pytest.raises(MalformedGridData):
        NavGrid.load(HEADER.pack(MAGIC, 1, 0, 1, 1, 0.0, 0.0, 0.0) + b"\x01")


def test_world_position_is_affine() -> None:
    grid = grid_from_ascii(OPEN_3X3, cell_size=2.0, origin=(10.0, -5.0))

    assert grid.world_position(grid.cell_at(0, 0)) == (10.0, -5.0)
    assert grid.world_position(grid.cell_at(1, 2)) == (12.0, -1.0)


def test_nearest_cell_inverts_world_position() -> None:
    grid = grid_from_ascii(OPEN_3X3, cell_size=2.0, origin=(10.0, -5.0))

    for cell in grid:
        x, y = grid.world_position(cell)
        assert grid.nearest_cell(x, y) is cell

    assert grid.nearest_cell(12.9, -1.2).coord == (1, 2)


def test_nearest_cell_clamps_outside_points() -> None:
    grid = grid_from_ascii(
        """
        .....
        .....
        .....
        .....
        .....
        """
    )

    assert grid.nearest_cell(2.4, 3.6).coord == (2, 4)
    assert grid.nearest_cell(-10.0, 100.0).coord == (0, 4)
    assert grid.nearest_cell(4.5, 0.0).coord == (4, 0)
    assert grid.nearest_cell(1e9, -1e9).coord == (4, 0)


def test_nearest_cell_ignores_walkability() -> None:
    grid = grid_from_ascii(
        """
        .#.
        """
    )
    assert grid.nearest_cell(1.0, 0.0).coord == (1, 0)


def test_neighbors_four_connected() -> None:
    grid = grid_from_ascii(
        """
        ...
        .#.
        ...
        """
    )

    corner = {c.coord for c in grid.neighbors(grid.cell_at(0, 0))}
    edge = {c.coord for c in grid.neighbors(grid.cell_at(1, 0))}

    assert corner == {(1, 0), (0, 1)}
    assert edge == {(0, 0), (2, 0)}


def test_neighbors_diagonal_without_corner_cutting() -> None:
    open_grid = grid_from_ascii(OPEN_3X3, diagonal=True)
    assert len(open_grid.neighbors(open_grid.cell_at(1, 1))) == 8

    walled = grid_from_ascii(
        """
        .#
        ..
        """,
        diagonal=True,
    )
    # (0,0) -> (1,1) would clip the blocked (1,0) corner
    assert {c.coord for c in walled.neighbors(walled.cell_at(0, 0))} == {(0, 1)}


def test_step_cost_scales_by_target_cost() -> None:
    a = GridCell(0, 0)
    right = GridCell(1, 0, cost=3)
    diag = GridCell(1, 1, cost=2)

    assert NavGrid.step_cost(a, right) == 3.0
    assert NavGrid.step_cost(a, diag) == pytest.approx(2 * SQRT2)


def test_reset_clears_search_state() -> None:
    grid = grid_from_ascii(OPEN_3X3)
    find_path(grid, grid.cell_at(0, 0), grid.cell_at(2, 2))

    assert any(c.closed for c in grid)

    grid.reset()

    for cell in grid:
        assert cell.g == math.inf
        assert cell.closed is False
        assert cell.parent is None


def test_grid_from_ascii_validates_rows_and_symbols() -> None:
    with pytest.raises(ValueError):
        grid_from_ascii("")
    with pytest.raises(ValueError):
        grid_from_ascii("...\n..")
    with pytest.raises(ValueError):
        grid_from_ascii(".x.")
    with pytest.raises(ValueError):
        grid_from_ascii(".0.")
