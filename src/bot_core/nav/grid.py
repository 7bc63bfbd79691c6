# navigation grid loaded from a pre-baked binary map
# src/bot_core/nav/grid.py
"""
NavGrid: discretized 2D navigation grid.

This module only knows about cells and the affine mapping between cell
coordinates and world space. It does not know about players, rooms or
movement; that belongs to nav.controller.

Binary layout (little-endian):

    offset  size   field
    0       4      magic b"NGRD"
    4       1      version (1)
    5       1      flags (bit 0: diagonal movement allowed)
    6       2      width  (uint16)
    8       2      height (uint16)
    10      4      cell_size (float32)
    14      4      origin_x (float32)
    18      4      origin_y (float32)
    22      w*h    one cost byte per cell, row-major; 0 = blocked
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .errors import MalformedGridData

# (x, y) integer cell coordinates: column, row
Coord = Tuple[int, int]

# (x, y) world-space position
Vec2 = Tuple[float, float]

HEADER = struct.Struct("<4sBBHHfff")
MAGIC = b"NGRD"
VERSION = 1
FLAG_DIAGONAL = 0x01

BLOCKED = 0
SQRT2 = math.sqrt(2.0)

_ORTHOGONAL: Tuple[Coord, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
_DIAGONAL: Tuple[Coord, ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))


@dataclass(eq=False)
class GridCell:
    """
    One node of the grid.

    `cost` is the traversal weight of entering this cell (1..255), or
    BLOCKED. The remaining fields are per-search bookkeeping owned by the
    pathfinder and wiped by NavGrid.reset().
    """

    x: int
    y: int
    cost: int = 1

    g: float = field(default=math.inf, repr=False)
    closed: bool = field(default=False, repr=False)
    parent: Optional["GridCell"] = field(default=None, repr=False)

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)

    @property
    def walkable(self) -> bool:
        return self.cost != BLOCKED

    def clear_search_state(self) -> None:
        self.g = math.inf
        self.closed = False
        self.parent = None


@dataclass
class NavGrid:
    """
    Full navigation map plus its world-space mapping.

    Cells are stored row-major so lookups by coordinate are O(1). Dimensions
    and mapping parameters never change after construction.
    """

    width: int
    height: int
    cell_size: float
    origin: Vec2
    cells: List[GridCell]
    diagonal: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise MalformedGridData(
                f"Grid dimensions must be positive, got {self.width}x{self.height}"
            )
        if not self.cell_size > 0:
            raise MalformedGridData(f"Cell size must be positive, got {self.cell_size}")
        if len(self.cells) != self.width * self.height:
            raise MalformedGridData(
                f"Expected {self.width * self.height} cells, got {len(self.cells)}"
            )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, data: bytes, *, diagonal: Optional[bool] = None) -> "NavGrid":
        """
        Parse a serialized grid.

        `diagonal` overrides the connectivity flag stored in the header.

        Raises MalformedGridData if the header is invalid or the payload
        length does not match the declared dimensions. No partial grid is
        ever returned.
        """
        if len(data) < HEADER.size:
            raise MalformedGridData(
                f"Grid data too short for header: {len(data)} < {HEADER.size} bytes"
            )

        magic, version, flags, width, height, cell_size, ox, oy = HEADER.unpack_from(data, 0)
        if magic != MAGIC:
            raise MalformedGridData(f"Bad grid magic {magic!r}")
        if version != VERSION:
            raise MalformedGridData(f"Unsupported grid version {version}")

        payload = data[HEADER.size:]
        if len(payload) != width * height:
            raise MalformedGridData(
                f"Grid declares {width}x{height} cells but payload has {len(payload)} bytes"
            )

        cells = [
            GridCell(x=i % width, y=i // width, cost=cost)
            for i, cost in enumerate(payload)
        ]

        if diagonal is None:
            diagonal = bool(flags & FLAG_DIAGONAL)

        return cls(
            width=width,
            height=height,
            cell_size=cell_size,
            origin=(ox, oy),
            cells=cells,
            diagonal=diagonal,
        )

    def to_bytes(self) -> bytes:
        """Serialize back into the binary layout accepted by load()."""
        flags = FLAG_DIAGONAL if self.diagonal else 0
        header = HEADER.pack(
            MAGIC,
            VERSION,
            flags,
            self.width,
            self.height,
            self.cell_size,
            self.origin[0],
            self.origin[1],
        )
        return header + bytes(cell.cost for cell in self.cells)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Optional[GridCell]:
        """Return the cell at (x, y), or None when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return self.cells[y * self.width + x]

    def is_walkable(self, x: int, y: int) -> bool:
        cell = self.cell_at(x, y)
        return cell is not None and cell.walkable

    def __iter__(self) -> Iterator[GridCell]:
        return iter(self.cells)

    def nearest_cell(self, world_x: float, world_y: float) -> GridCell:
        """
        Map a world position to the closest cell.

        Inverse of world_position(), rounded to the nearest coordinate and
        clamped into the grid, so any point (even far outside) yields a cell.
        Walkability is not considered.
        """
        ox, oy = self.origin
        cx = math.floor((world_x - ox) / self.cell_size + 0.5)
        cy = math.floor((world_y - oy) / self.cell_size + 0.5)

        cx = min(max(cx, 0), self.width - 1)
        cy = min(max(cy, 0), self.height - 1)

        return self.cells[cy * self.width + cx]

    def world_position(self, cell: GridCell) -> Vec2:
        """World position of a cell: origin + coordinate * cell_size."""
        ox, oy = self.origin
        return (ox + cell.x * self.cell_size, oy + cell.y * self.cell_size)

    # ------------------------------------------------------------------
    # Search support
    # ------------------------------------------------------------------

    def neighbors(self, cell: GridCell) -> List[GridCell]:
        """
        Walkable neighbors of `cell`.

        Always 4-connected; with `diagonal` enabled, diagonal steps are added
        when both orthogonal cells they pass between are walkable (no corner
        cutting).
        """
        result: List[GridCell] = []

        for dx, dy in _ORTHOGONAL:
            nxt = self.cell_at(cell.x + dx, cell.y + dy)
            if nxt is not None and nxt.walkable:
                result.append(nxt)

        if self.diagonal:
            for dx, dy in _DIAGONAL:
                nxt = self.cell_at(cell.x + dx, cell.y + dy)
                if nxt is None or not nxt.walkable:
                    continue
                if not (
                    self.is_walkable(cell.x + dx, cell.y)
                    and self.is_walkable(cell.x, cell.y + dy)
                ):
                    continue
                result.append(nxt)

        return result

    @staticmethod
    def step_cost(current: GridCell, nxt: GridCell) -> float:
        """Edge weight: 1 orthogonal / sqrt(2) diagonal, scaled by the target cell cost."""
        base = SQRT2 if (current.x != nxt.x and current.y != nxt.y) else 1.0
        return base * nxt.cost

    def reset(self) -> None:
        """Clear per-search bookkeeping on every cell. Call before each search."""
        for cell in self.cells:
            cell.clear_search_state()


# ---------------------------------------------------------------------------
# ASCII maps (tooling and tests)
# ---------------------------------------------------------------------------


def grid_from_ascii(
    text: str,
    *,
    cell_size: float = 1.0,
    origin: Vec2 = (0.0, 0.0),
    diagonal: bool = False,
) -> NavGrid:
    """
    Build a NavGrid from a text map.

    One line per row (first line is row 0):
      - "." walkable, cost 1
      - "#" blocked
      - "1".."9" walkable with that cost

    Blank lines are ignored. All rows must have the same length.
    """
    rows = [line.strip() for line in text.splitlines() if line.strip()]
    if not rows:
        raise ValueError("ASCII map is empty")

    width = len(rows[0])
    cells: List[GridCell] = []
    for y, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"Row {y} has length {len(row)}, expected {width}")
        for x, ch in enumerate(row):
            if ch == ".":
                cost = 1
            elif ch == "#":
                cost = BLOCKED
            elif ch.isdigit() and ch != "0":
                cost = int(ch)
            else:
                raise ValueError(f"Unknown map symbol {ch!r} at ({x}, {y})")
            cells.append(GridCell(x=x, y=y, cost=cost))

    return NavGrid(
        width=width,
        height=len(rows),
        cell_size=cell_size,
        origin=origin,
        cells=cells,
        diagonal=diagonal,
    )
