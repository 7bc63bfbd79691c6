# NavCommandController linking control commands to MovementController
#src/monitoring/controller.py
"""
Control surface for the navigation runtime.

NavCommandController wraps a MovementController-like object and exposes
external control via ControlCommand messages on the EventBus.

Supported commands (ControlCommandType):
- PAUSE        -> controller.pause()
- RESUME       -> controller.start()
- STOP         -> controller.stop()
- GO           -> controller.go((x, y))
- FOLLOW       -> controller.follow(player_id)
- RECALCULATE  -> controller.recalculate()
- DUMP_STATE   -> emit a debug snapshot as a SNAPSHOT event
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Optional, Protocol

from .bus import EventBus
from .events import (
    ControlCommand,
    ControlCommandType,
    EventType,
)
from .logger import log_event


class NavigationControl(Protocol):
    """Methods the control surface drives (see bot_core.nav.MovementController)."""

    def go(self, target: Any) -> Any: ...

    def follow(self, player: Any) -> bool: ...

    def stop(self) -> None: ...

    def pause(self) -> None: ...

    def start(self) -> None: ...

    def recalculate(self) -> Any: ...

    def debug_state(self) -> Dict[str, Any]: ...


class NavCommandController:
    """
    Applies ControlCommands from the bus to a movement controller.

    Every handled command is echoed as a CONTROL_COMMAND event so dashboards
    and the JSONL log see who did what.
    """

    MODULE = "monitoring.controller"

    def __init__(self, nav: NavigationControl, bus: EventBus) -> None:
        self._nav = nav
        self._bus = bus
        self._bus.subscribe_commands(self._handle_command)

    def close(self) -> None:
        self._bus.unsubscribe_commands(self._handle_command)

    # --------------------------------------------------------
    # Command handling
    # --------------------------------------------------------

    def _handle_command(self, cmd: ControlCommand) -> None:
        if cmd.cmd == ControlCommandType.PAUSE:
            self._nav.pause()
            self._log_control("PAUSE", {})

        elif cmd.cmd == ControlCommandType.RESUME:
            self._nav.start()
            self._log_control("RESUME", {})

        elif cmd.cmd == ControlCommandType.STOP:
            self._nav.stop()
            self._log_control("STOP", {})

        elif cmd.cmd == ControlCommandType.GO:
            target = _point_arg(cmd.args)
            if target is None:
                self._log_control("GO", {"error": "invalid_target", "args": dict(cmd.args)})
                return
            destination = self._nav.go(target)
            self._log_control("GO", {"destination": _jsonable(destination)})

        elif cmd.cmd == ControlCommandType.FOLLOW:
            player_id = cmd.args.get("player_id")
            ok = self._nav.follow(player_id)
            self._log_control("FOLLOW", {"player_id": player_id, "following": ok})

        elif cmd.cmd == ControlCommandType.RECALCULATE:
            result = self._nav.recalculate()
            payload: Dict[str, Any] = {"ran": result is not None}
            if result is not None:
                payload["success"] = getattr(result, "success", None)
            self._log_control("RECALCULATE", payload)

        elif cmd.cmd == ControlCommandType.DUMP_STATE:
            self._log_snapshot(self._safe_debug_state())

    # --------------------------------------------------------
    # Logging helpers
    # --------------------------------------------------------

    def _log_control(self, cmd_name: str, payload: Dict[str, Any]) -> None:
        log_event(
            bus=self._bus,
            module=self.MODULE,
            event_type=EventType.CONTROL_COMMAND,
            message=f"Control command: {cmd_name}",
            payload={"cmd": cmd_name, **payload},
        )

    def _log_snapshot(self, state: Dict[str, Any]) -> None:
        log_event(
            bus=self._bus,
            module=self.MODULE,
            event_type=EventType.SNAPSHOT,
            message="Navigation state snapshot",
            payload={"state": state},
        )

    def _safe_debug_state(self) -> Dict[str, Any]:
        try:
            state = self._nav.debug_state()
        except Exception as exc:
            return {
                "error": "debug_state_failed",
                "details": repr(exc),
            }

        if is_dataclass(state) and not isinstance(state, type):
            return asdict(state)
        return state


def _point_arg(args: Dict[str, Any]) -> Optional[tuple[float, float]]:
    try:
        return (float(args["x"]), float(args["y"]))
    except (KeyError, TypeError, ValueError):
        return None


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value
