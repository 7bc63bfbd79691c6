# src/bot_core/nav/events.py
"""
Navigation events and a small cancelable emitter.

MovementController emits these to whoever drives or observes the agent.
A listener can veto the side effect of an event by calling event.cancel();
emit() reports that back as a boolean. Only "engine.move" is acted upon
by the controller; cancelling the others is recorded but has no effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Mapping, Optional

log = logging.getLogger(__name__)


class NavEventType(str, Enum):
    """Event names emitted by MovementController."""

    START = "pathfinding.start"
    STOP = "pathfinding.stop"
    END = "pathfinding.end"
    PAUSE = "pathfinding.pause"
    MOVE = "engine.move"
    RECALCULATE = "engine.recalculate"


@dataclass
class NavEvent:
    """A single emitted navigation event."""

    type: NavEventType
    data: Dict[str, Any] = field(default_factory=dict)
    _canceled: bool = field(default=False, repr=False)

    def cancel(self) -> None:
        """Reject the side effect this event announces."""
        self._canceled = True

    @property
    def canceled(self) -> bool:
        return self._canceled


NavListener = Callable[[NavEvent], None]


class NavEventEmitter:
    """
    In-process listener registry keyed by NavEventType.

    Listeners are called in registration order. A listener raising an
    exception is logged and skipped; it neither cancels the event nor stops
    the remaining listeners.
    """

    def __init__(self) -> None:
        self._listeners: Dict[NavEventType, List[NavListener]] = {}
        self._lock = Lock()

    def on(self, event_type: NavEventType, fn: NavListener) -> None:
        with self._lock:
            self._listeners.setdefault(NavEventType(event_type), []).append(fn)

    def off(self, event_type: NavEventType, fn: NavListener) -> None:
        """Remove a listener; safe to call if it was never registered."""
        with self._lock:
            listeners = self._listeners.get(NavEventType(event_type))
            if listeners and fn in listeners:
                listeners.remove(fn)

    def emit(
        self,
        event_type: NavEventType,
        data: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Deliver an event to all listeners.

        Returns True when the event was accepted, False when a listener
        called cancel().
        """
        event = NavEvent(type=NavEventType(event_type), data=dict(data or {}))

        with self._lock:
            listeners = list(self._listeners.get(event.type, ()))

        for fn in listeners:
            try:
                fn(event)
            except Exception:
                log.exception("Navigation listener failed for %s", event.type.value)

        return not event.canceled
