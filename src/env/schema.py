# NavConfig and MapProfile dataclasses
# src/env/schema.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass
class MapProfile:
    """Named points of interest on one map, keyed by vent id."""
    map_id: str
    vents: Dict[str, Tuple[float, float]] = field(default_factory=dict)


@dataclass
class NavConfig:
    """Movement controller tuning plus per-map data."""
    movement_interval: int = 6            # act on every Nth simulation tick
    recalculate_every: int = 1            # periodic re-search, in raw ticks
    diagonal: bool = False                # 8-connected search when True
    speed: Optional[Tuple[float, float]] = None  # None -> room player speed
    grid_data_dir: str = "data/grids"     # relative to the project root
    max_search_steps: Optional[int] = None
    maps: Dict[str, MapProfile] = field(default_factory=dict)

    def map_profile(self, map_id: object) -> Optional[MapProfile]:
        if map_id is None:
            return None
        return self.maps.get(str(map_id))
