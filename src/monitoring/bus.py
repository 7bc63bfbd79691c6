# EventBus for monitoring events and control commands
"""
In-process pub/sub for navigation monitoring.

Producers:
    - MovementController mirrors every navigation notification (NAV_*)
    - app.runtime announces grid loads (GRID_LOADED)
    - NavCommandController echoes handled commands (CONTROL_COMMAND, SNAPSHOT)

Consumers:
    - JsonFileLogger, TuiDashboard, tests

Subscribers may restrict themselves to a set of EventTypes; command
handlers always see every ControlCommand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, FrozenSet, Iterable, List, Optional

from .events import ControlCommand, EventType, MonitoringEvent

log = logging.getLogger(__name__)


SubscriberFn = Callable[[MonitoringEvent], None]
CommandHandlerFn = Callable[[ControlCommand], None]


@dataclass(frozen=True)
class _Subscription:
    fn: SubscriberFn
    event_types: Optional[FrozenSet[EventType]] = None

    def wants(self, event: MonitoringEvent) -> bool:
        return self.event_types is None or event.event_type in self.event_types


class EventBus:
    """
    Thread-safe event bus for monitoring events and control commands.

    Delivery happens on the publishing thread, in subscription order, over
    a snapshot of the handler lists, so handlers may publish or
    (un)subscribe re-entrantly. A failing handler is logged and skipped.
    """

    def __init__(self) -> None:
        self._subscriptions: List[_Subscription] = []
        self._cmd_handlers: List[CommandHandlerFn] = []
        self._lock = Lock()

    # --------------------------------------------------------
    # Monitoring events
    # --------------------------------------------------------

    def subscribe(
        self,
        fn: SubscriberFn,
        event_types: Optional[Iterable[EventType]] = None,
    ) -> None:
        """
        Register `fn` for monitoring events.

        With `event_types`, only events of those types are delivered.
        """
        types = frozenset(event_types) if event_types is not None else None
        with self._lock:
            self._subscriptions.append(_Subscription(fn=fn, event_types=types))

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """Drop every subscription of `fn`; unknown handlers are ignored."""
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s.fn != fn]

    def publish(self, event: MonitoringEvent) -> None:
        with self._lock:
            targets = [s.fn for s in self._subscriptions if s.wants(event)]

        for fn in targets:
            try:
                fn(event)
            except Exception:
                log.exception("Monitoring subscriber failed on %s", event.event_type.name)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    # --------------------------------------------------------
    # Control commands
    # --------------------------------------------------------

    def subscribe_commands(self, fn: CommandHandlerFn) -> None:
        with self._lock:
            self._cmd_handlers.append(fn)

    def unsubscribe_commands(self, fn: CommandHandlerFn) -> None:
        with self._lock:
            self._cmd_handlers = [h for h in self._cmd_handlers if h != fn]

    def publish_command(self, cmd: ControlCommand) -> None:
        with self._lock:
            handlers = list(self._cmd_handlers)

        if not handlers:
            log.debug("Control command %s published with no handler attached", cmd.cmd.name)

        for fn in handlers:
            try:
                fn(cmd)
            except Exception:
                log.exception("Command handler failed on %s", cmd.cmd.name)

    def clear(self) -> None:
        """Drop all subscribers and command handlers (tests, shutdown)."""
        with self._lock:
            self._subscriptions.clear()
            self._cmd_handlers.clear()


# Process-wide bus for the dashboard entry point and ad-hoc scripts.
default_bus = EventBus()
