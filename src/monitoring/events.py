# path: src/monitoring/events.py
"""
Monitoring vocabulary: what the navigation runtime reports, and what
operators may ask of it.

Events travel as MonitoringEvent over monitoring.bus.EventBus and are
persisted by monitoring.logger.JsonFileLogger in their `to_dict()` form;
`MonitoringEvent.from_dict()` reads them back. Commands travel as
ControlCommand and are applied by monitoring.controller.NavCommandController.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum, auto
from typing import Any, Dict, FrozenSet, Mapping, Optional


class EventType(Enum):
    # MovementController notifications, one per NavEventType
    NAV_START = auto()
    NAV_STOP = auto()
    NAV_END = auto()
    NAV_PAUSE = auto()
    NAV_MOVE = auto()
    NAV_RECALCULATE = auto()

    GRID_LOADED = auto()
    SNAPSHOT = auto()
    CONTROL_COMMAND = auto()
    LOG = auto()

    @property
    def is_navigation(self) -> bool:
        return self in NAVIGATION_EVENTS


NAVIGATION_EVENTS: FrozenSet[EventType] = frozenset(
    {
        EventType.NAV_START,
        EventType.NAV_STOP,
        EventType.NAV_END,
        EventType.NAV_PAUSE,
        EventType.NAV_MOVE,
        EventType.NAV_RECALCULATE,
    }
)


@dataclass
class MonitoringEvent:
    """
    One record on the monitoring bus.

    `module` names the producer ("bot_core.nav", "app.runtime", ...).
    `payload` must stay JSON-safe; positions are [x, y] lists or tuples.
    `correlation_id` is free for callers that group events, e.g. per run.
    """

    ts: float
    module: str
    event_type: EventType
    message: str
    payload: Dict[str, Any]
    correlation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event_type"] = self.event_type.name
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MonitoringEvent":
        """
        Rebuild an event from its `to_dict()` form.

        Raises ValueError when `event_type` is missing or unknown.
        """
        name = data.get("event_type")
        try:
            event_type = EventType[name]  # type: ignore[index]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"unknown event type {name!r}") from exc

        payload = data.get("payload")
        return cls(
            ts=float(data.get("ts") or 0.0),
            module=str(data.get("module") or ""),
            event_type=event_type,
            message=str(data.get("message") or ""),
            payload=dict(payload) if isinstance(payload, Mapping) else {},
            correlation_id=data.get("correlation_id"),
        )


class ControlCommandType(Enum):
    PAUSE = auto()          # keep the path, suppress moves
    RESUME = auto()
    STOP = auto()           # drop the destination
    GO = auto()             # args: x, y
    FOLLOW = auto()         # args: player_id
    RECALCULATE = auto()
    DUMP_STATE = auto()     # answered with a SNAPSHOT event


@dataclass(frozen=True)
class ControlCommand:
    """
    Operator request for the movement controller.

    Arguments are passed through untouched; NavCommandController validates
    them when the command is applied.
    """

    cmd: ControlCommandType
    args: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def pause(cls) -> "ControlCommand":
        return cls(ControlCommandType.PAUSE)

    @classmethod
    def resume(cls) -> "ControlCommand":
        return cls(ControlCommandType.RESUME)

    @classmethod
    def stop(cls) -> "ControlCommand":
        return cls(ControlCommandType.STOP)

    @classmethod
    def go(cls, x: Any, y: Any) -> "ControlCommand":
        return cls(ControlCommandType.GO, {"x": x, "y": y})

    @classmethod
    def follow(cls, player_id: Any) -> "ControlCommand":
        return cls(ControlCommandType.FOLLOW, {"player_id": player_id})

    @classmethod
    def recalculate(cls) -> "ControlCommand":
        return cls(ControlCommandType.RECALCULATE)

    @classmethod
    def dump_state(cls) -> "ControlCommand":
        return cls(ControlCommandType.DUMP_STATE)

    @classmethod
    def parse(cls, name: str, args: Optional[Mapping[str, Any]] = None) -> "ControlCommand":
        """Build a command from its case-insensitive name, e.g. ``parse("go", {"x": 1, "y": 2})``."""
        try:
            cmd = ControlCommandType[name.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"unknown control command {name!r}") from exc
        return cls(cmd, dict(args or {}))
