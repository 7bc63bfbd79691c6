from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .schema import MapProfile, NavConfig


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG = CONFIG_ROOT / "nav.yaml"

# Set GRIDNAV_CONFIG to point at an alternative nav.yaml.
CONFIG_ENV_VAR = "GRIDNAV_CONFIG"


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from `path`."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _parse_point(raw: Any, where: str) -> Tuple[float, float]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ValueError(f"{where}: expected [x, y], got {raw!r}")
    try:
        return (float(raw[0]), float(raw[1]))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{where}: non-numeric coordinate in {raw!r}") from exc


def _parse_maps(raw: Any) -> Dict[str, MapProfile]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("'maps' must be a mapping of map id -> profile")

    maps: Dict[str, MapProfile] = {}
    for map_id, profile_raw in raw.items():
        key = str(map_id)
        profile_raw = profile_raw or {}
        if not isinstance(profile_raw, dict):
            raise ValueError(f"maps.{key} must be a mapping")
        vents_raw = profile_raw.get("vents") or {}
        if not isinstance(vents_raw, dict):
            raise ValueError(f"maps.{key}.vents must be a mapping")
        vents = {
            str(vent_id): _parse_point(point, f"maps.{key}.vents.{vent_id}")
            for vent_id, point in vents_raw.items()
        }
        maps[key] = MapProfile(map_id=key, vents=vents)
    return maps


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def config_from_mapping(data: Dict[str, Any]) -> NavConfig:
    """Build a validated NavConfig from an already-parsed mapping."""
    nav_raw = data.get("navigation") or {}
    if not isinstance(nav_raw, dict):
        raise ValueError("'navigation' must be a mapping")

    defaults = NavConfig()

    speed_raw = nav_raw.get("speed")
    speed = _parse_point(speed_raw, "navigation.speed") if speed_raw is not None else None

    max_steps = nav_raw.get("max_search_steps")

    cfg = NavConfig(
        movement_interval=int(nav_raw.get("movement_interval", defaults.movement_interval)),
        recalculate_every=int(nav_raw.get("recalculate_every", defaults.recalculate_every)),
        diagonal=bool(nav_raw.get("diagonal", defaults.diagonal)),
        speed=speed,
        grid_data_dir=str(nav_raw.get("grid_data_dir", defaults.grid_data_dir)),
        max_search_steps=int(max_steps) if max_steps is not None else None,
        maps=_parse_maps(data.get("maps")),
    )

    _validate_config(cfg)
    return cfg


def load_nav_config(path: Optional[Path] = None) -> NavConfig:
    """
    Main entry point: load and validate the navigation config.

    Resolution order: explicit `path`, $GRIDNAV_CONFIG, config/nav.yaml.
    """
    if path is None:
        override = os.getenv(CONFIG_ENV_VAR)
        path = Path(override) if override else DEFAULT_CONFIG
    return config_from_mapping(_load_yaml(Path(path)))


def resolve_grid_dir(cfg: NavConfig) -> Path:
    """Absolute directory holding per-map grid files."""
    grid_dir = Path(cfg.grid_data_dir)
    if not grid_dir.is_absolute():
        grid_dir = PROJECT_ROOT / grid_dir
    return grid_dir


def _validate_config(cfg: NavConfig) -> None:
    """Minimal sanity checks for the navigation config."""
    if cfg.movement_interval < 1:
        raise ValueError(f"movement_interval must be >= 1, got {cfg.movement_interval}")
    if cfg.recalculate_every < 1:
        raise ValueError(f"recalculate_every must be >= 1, got {cfg.recalculate_every}")
    if cfg.max_search_steps is not None and cfg.max_search_steps < 1:
        raise ValueError(f"max_search_steps must be >= 1, got {cfg.max_search_steps}")
    if cfg.speed is not None and (cfg.speed[0] < 0 or cfg.speed[1] < 0):
        raise ValueError(f"speed components must be non-negative, got {cfg.speed}")
