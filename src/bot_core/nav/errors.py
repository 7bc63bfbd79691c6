# src/bot_core/nav/errors.py
"""
Domain errors for the navigation subsystem.

Only grid loading raises. Unreachable goals, missing positions and rejected
moves are normal outcomes and never surface as exceptions.
"""

from __future__ import annotations


class NavError(RuntimeError):
    """Base class for navigation errors."""


class MalformedGridData(NavError):
    """Serialized grid does not match the expected binary layout."""


class GridNotFound(NavError):
    """No grid resource exists for the requested map id."""

    def __init__(self, map_id: object, path: object = None) -> None:
        self.map_id = map_id
        self.path = path
        super().__init__(f"No navigation grid for map {map_id!r} (looked at {path})")
