# config/tools/validate_env.py

import sys           # for exit codes
from pprint import pprint  # for structured printing

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_env.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from env.loader import load_nav_config, resolve_grid_dir  # import our loader
from bot_core.nav import NavError, NavGrid


def main() -> None:
    """Load and print the navigation config, then check every grid file parses."""
    try:
        cfg = load_nav_config()              # resolve nav.yaml (or $GRIDNAV_CONFIG)
    except Exception as e:                   # catch *any* error for debugging
        print("Config validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        sys.exit(1)                          # non-zero exit: CI will mark as failed

    print("Config validation OK.")
    print("\nMovement interval:", cfg.movement_interval)
    print("Recalculate every:", cfg.recalculate_every)
    print("Diagonal:", cfg.diagonal)
    print("\nMaps:")
    pprint(cfg.maps)

    grid_dir = resolve_grid_dir(cfg)
    print("\nGrid directory:", grid_dir)
    if not grid_dir.is_dir():
        print("  (missing; build grids with tools/build_grid.py)")
        return

    failed = False
    for path in sorted(p for p in grid_dir.iterdir() if p.is_file() and not p.name.startswith(".")):
        try:
            grid = NavGrid.load(path.read_bytes())
        except NavError as e:
            failed = True
            print(f"  {path.name}: INVALID ({e})", file=sys.stderr)
            continue
        print(f"  {path.name}: {grid.width}x{grid.height} cell_size={grid.cell_size}")

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
