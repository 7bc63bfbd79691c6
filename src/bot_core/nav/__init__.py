# src/bot_core/nav/__init__.py
"""
Navigation subsystem for bot_core.

Provides:
- NavGrid / GridCell: binary grid loading and world <-> cell mapping
- find_path: deterministic A* over a NavGrid
- GridCache: lazy per-map grid loading
- MovementController: tick-driven path following for the local player
"""

from __future__ import annotations

from .cache import GridCache, directory_loader
from .controller import MovementController, NavigationState, NavPhase
from .errors import GridNotFound, MalformedGridData, NavError
from .events import NavEvent, NavEventEmitter, NavEventType
from .grid import Coord, GridCell, NavGrid, Vec2, grid_from_ascii
from .pathfinder import PathfindingResult, find_path

__all__ = [
    "Coord",
    "Vec2",
    "GridCell",
    "NavGrid",
    "grid_from_ascii",
    "GridCache",
    "directory_loader",
    "find_path",
    "PathfindingResult",
    "MovementController",
    "NavigationState",
    "NavPhase",
    "NavEvent",
    "NavEventEmitter",
    "NavEventType",
    "NavError",
    "MalformedGridData",
    "GridNotFound",
]
