# src/app/logging_config.py
"""
Process-wide logging setup for navigation scripts and hosts.

Library modules only create `logging.getLogger(__name__)` loggers; the
entry point decides where records go:

    from app.logging_config import configure_logging
    configure_logging()                              # stdout, INFO
    configure_logging(logging.DEBUG, log_file=Path("logs/nav/debug.log"))

GRIDNAV_LOG_LEVEL (e.g. "DEBUG") overrides the default level when no level
is passed explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV_VAR = "GRIDNAV_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    name = os.getenv(LOG_LEVEL_ENV_VAR, "").strip().upper()
    resolved = logging.getLevelName(name) if name else logging.INFO
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Optional[int] = None, *, log_file: Optional[Path] = None) -> None:
    """
    Attach a stdout handler (and optionally a file handler) to the root logger.

    Does nothing if the root logger already has handlers, so hosts that
    configure logging themselves are left alone.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    resolved = _resolve_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT)

    stream = logging.StreamHandler(stream=sys.stdout)
    stream.setFormatter(formatter)
    root.addHandler(stream)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(resolved)
