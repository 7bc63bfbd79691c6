# src/app/__init__.py
"""
Application entrypoints for the navigation bot.

Exposes:
- create_nav_runtime: wire config, grids, NavBot and monitoring around a client
- configure_logging: stdout logging setup for scripts
"""

from __future__ import annotations

from .logging_config import configure_logging
from .runtime import NavRuntime, build_grid_cache, create_nav_runtime

__all__ = [
    "NavRuntime",
    "build_grid_cache",
    "configure_logging",
    "create_nav_runtime",
]
