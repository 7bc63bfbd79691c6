# JSON logger subscribing to EventBus
"""
Persist monitoring events.

JsonFileLogger appends every event it receives to a JSON-lines file, the
format monitoring.tools reads back. log_event() is the one-call way for
producers to stamp and publish an event.

    bus = EventBus()
    with JsonFileLogger(Path("logs/nav/events.log"), bus) as sink:
        log_event(bus, "bot_core.nav", EventType.NAV_START, "pathfinding.start",
                  {"destination": [1.0, 2.0]})
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from .bus import EventBus
from .events import EventType, MonitoringEvent

log = logging.getLogger(__name__)


class JsonFileLogger:
    """
    Bus subscriber writing one JSON object per line (UTF-8, append mode).

    Values json cannot encode are written as their repr(). With
    `event_types`, other events are never delivered to the sink.
    """

    def __init__(
        self,
        path: Path,
        bus: EventBus,
        *,
        event_types: Optional[Iterable[EventType]] = None,
    ) -> None:
        self._path = Path(path)
        self._bus = bus
        self._written = 0
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")
        bus.subscribe(self._on_event, event_types=event_types)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def written(self) -> int:
        return self._written

    @property
    def closed(self) -> bool:
        return self._file.closed

    def _on_event(self, event: MonitoringEvent) -> None:
        if self._file.closed:
            log.warning("Event %s arrived after %s was closed", event.event_type.name, self._path)
            return
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=repr)
        try:
            self._file.write(line + "\n")
            self._file.flush()
        except OSError:
            log.warning("Could not write %s to %s", event.event_type.name, self._path, exc_info=True)
            return
        self._written += 1

    def close(self) -> None:
        """Unsubscribe and close the file; safe to call twice."""
        self._bus.unsubscribe(self._on_event)
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "JsonFileLogger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def log_event(
    bus: EventBus,
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> MonitoringEvent:
    """Timestamp, publish and return a MonitoringEvent."""
    event = MonitoringEvent(
        ts=time.time(),
        module=module,
        event_type=event_type,
        message=message,
        payload=payload or {},
        correlation_id=correlation_id,
    )
    bus.publish(event)
    return event
