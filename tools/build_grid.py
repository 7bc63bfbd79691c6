#!/usr/bin/env python3
"""
tools/build_grid.py

Convert an ASCII map into the binary grid format read by NavGrid.load().

    python tools/build_grid.py data/maps/demo.txt data/grids/demo
    python tools/build_grid.py map.txt out.bin --cell-size 0.5 --origin -4 -3 --diagonal

ASCII symbols: "." walkable, "#" blocked, "1".."9" walkable with that cost.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path when running as a script
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bot_core.nav import NavGrid, grid_from_ascii  # type: ignore[import]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a binary navigation grid from an ASCII map.")
    parser.add_argument("source", type=Path, help="ASCII map file")
    parser.add_argument("output", type=Path, help="Binary grid file to write")
    parser.add_argument("--cell-size", type=float, default=1.0)
    parser.add_argument("--origin", type=float, nargs=2, default=(0.0, 0.0), metavar=("X", "Y"))
    parser.add_argument("--diagonal", action="store_true", help="Mark the grid as 8-connected")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        text = args.source.read_text(encoding="utf-8")
        grid = grid_from_ascii(
            text,
            cell_size=args.cell_size,
            origin=(args.origin[0], args.origin[1]),
            diagonal=args.diagonal,
        )
    except (OSError, ValueError) as exc:
        print(f"build_grid: {exc}", file=sys.stderr)
        return 1

    data = grid.to_bytes()
    # Round-trip through the loader so a bad build never reaches data/.
    NavGrid.load(data)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(data)

    walkable = sum(1 for cell in grid if cell.walkable)
    print(
        f"Wrote {args.output} ({grid.width}x{grid.height}, "
        f"{walkable} walkable cells, {len(data)} bytes)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
