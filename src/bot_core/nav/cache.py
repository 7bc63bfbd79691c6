# src/bot_core/nav/cache.py
"""
Per-map grid cache.

Grids are loaded lazily on first use, keyed by map id, and never evicted
(maps are few and small). Concurrent first loads of the same map are
serialized with a per-map lock so the resource is read and parsed once.

Usage:

    from bot_core.nav.cache import GridCache, directory_loader

    cache = GridCache(directory_loader("data/grids"))
    grid = cache.get(0)
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Hashable, Optional

from .errors import GridNotFound
from .grid import NavGrid

log = logging.getLogger(__name__)

# Signature for a grid resource lookup: loader(map_id) -> raw bytes
GridLoaderFn = Callable[[Hashable], bytes]


def directory_loader(root: Path | str) -> GridLoaderFn:
    """
    Build a loader reading `<root>/<map_id>` files.

    Raises GridNotFound when the file does not exist.
    """
    base = Path(root)

    def _load(map_id: Hashable) -> bytes:
        path = base / str(map_id)
        if not path.is_file():
            raise GridNotFound(map_id, path)
        return path.read_bytes()

    return _load


class GridCache:
    """
    Map-id keyed NavGrid cache.

    Load failures propagate to the caller and leave nothing cached, so the
    next call retries.
    """

    def __init__(
        self,
        loader: GridLoaderFn,
        *,
        diagonal: Optional[bool] = None,
        on_loaded: Optional[Callable[[Hashable, NavGrid], None]] = None,
    ) -> None:
        self._loader = loader
        self._diagonal = diagonal
        self._on_loaded = on_loaded
        self._grids: Dict[Hashable, NavGrid] = {}
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()

    def __contains__(self, map_id: Hashable) -> bool:
        return map_id in self._grids

    def peek(self, map_id: Hashable) -> Optional[NavGrid]:
        """Return the cached grid without loading."""
        return self._grids.get(map_id)

    def get(self, map_id: Hashable) -> NavGrid:
        """Return the grid for `map_id`, loading it on first use."""
        grid = self._grids.get(map_id)
        if grid is not None:
            return grid

        with self._guard:
            lock = self._locks.setdefault(map_id, threading.Lock())

        with lock:
            # Another thread may have finished the load while we waited.
            grid = self._grids.get(map_id)
            if grid is not None:
                return grid

            data = self._loader(map_id)
            grid = NavGrid.load(data, diagonal=self._diagonal)
            self._grids[map_id] = grid

        log.info(
            "Loaded navigation grid map=%r size=%dx%d cell_size=%s diagonal=%s",
            map_id,
            grid.width,
            grid.height,
            grid.cell_size,
            grid.diagonal,
        )
        if self._on_loaded is not None:
            self._on_loaded(map_id, grid)
        return grid

    def put(self, map_id: Hashable, grid: NavGrid) -> None:
        """Seed the cache with an already-built grid (tools and tests)."""
        self._grids[map_id] = grid
