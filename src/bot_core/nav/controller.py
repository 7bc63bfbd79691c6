# tick-driven movement state machine
# src/bot_core/nav/controller.py
"""
MovementController: drives the local player along grid paths.

Owns the destination, the active path and the pause/follow state. On every
simulation tick it decides whether to search again, pops the next path
cell and turns it into a move intent for the room's actuator.

States:
    IDLE     no destination
    SEEKING  destination set, path being computed / followed
    PAUSED   destination set, move intents suppressed
Following another player is a flag layered on top of any of these.

Tick handling never raises; failures are logged and the tick is skipped so
the simulation loop keeps advancing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Optional, Protocol, Tuple

from env.schema import NavConfig
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from ..room_tracker import PlayerState
from .cache import GridCache
from .events import NavEventEmitter, NavEventType
from .grid import GridCell, NavGrid, Vec2
from .pathfinder import PathfindingResult, find_path

log = logging.getLogger(__name__)


class Room(Protocol):
    """What the controller needs from the room (see bot_core.room_tracker)."""

    @property
    def map_id(self) -> Optional[Hashable]: ...

    @property
    def player_speed(self) -> float: ...

    @property
    def local_position(self) -> Optional[Vec2]: ...

    def is_local(self, player: PlayerState) -> bool: ...

    def resolve_player(self, ref: Any) -> Optional[PlayerState]: ...

    def move(self, position: Vec2, velocity: Vec2) -> None: ...

    def on(self, event: str, handler: Callable[..., None]) -> None: ...


class NavPhase(str, Enum):
    IDLE = "idle"
    SEEKING = "seeking"
    PAUSED = "paused"


@dataclass
class NavigationState:
    """
    JSON-friendly snapshot of the controller's state.

    `path` is None before the first search (or after stop), and [] while
    the last search failed and the destination is being retried.
    """

    phase: NavPhase
    destination: Optional[Vec2]
    path: Optional[List[Tuple[int, int]]]
    following: Optional[int]
    paused: bool
    moved: bool
    tick: int
    map_id: Optional[Hashable] = None
    last_search: Dict[str, Any] = field(default_factory=dict)


_MONITORING_TYPES = {
    NavEventType.START: EventType.NAV_START,
    NavEventType.STOP: EventType.NAV_STOP,
    NavEventType.END: EventType.NAV_END,
    NavEventType.PAUSE: EventType.NAV_PAUSE,
    NavEventType.MOVE: EventType.NAV_MOVE,
    NavEventType.RECALCULATE: EventType.NAV_RECALCULATE,
}


class MovementController:
    """
    Tick-driven path follower for the local player.

    Listen on `events` (NavEventEmitter) for:
        pathfinding.start       {destination}
        pathfinding.stop        {reached}
        pathfinding.end         {}
        pathfinding.pause       {}
        engine.move             {position, velocity}   cancelable
        engine.recalculate      {path, success}

    When `bus` is given every notification is mirrored there as a
    MonitoringEvent.
    """

    MODULE = "bot_core.nav"

    def __init__(
        self,
        room: Room,
        grids: GridCache,
        config: Optional[NavConfig] = None,
        *,
        bus: Optional[EventBus] = None,
        events: Optional[NavEventEmitter] = None,
    ) -> None:
        self._room = room
        self._grids = grids
        self.config = config or NavConfig()
        self.events = events or NavEventEmitter()
        self._bus = bus

        self._tick: int = 0
        self._moved: bool = False
        self._paused: bool = False
        self._last_result: Optional[PathfindingResult] = None

        self.destination: Optional[Vec2] = None
        self.path: Optional[List[GridCell]] = None
        self.following: Optional[PlayerState] = None

        room.on("fixed_update", self.tick)
        room.on("player_move", self._handle_move)
        room.on("player_leave", self._handle_leave)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def position(self) -> Optional[Vec2]:
        return self._room.local_position

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def moved(self) -> bool:
        return self._moved

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def grid(self) -> Optional[NavGrid]:
        """Grid for the current map if it has been loaded already."""
        map_id = self._room.map_id
        if map_id is None:
            return None
        return self._grids.peek(map_id)

    @property
    def phase(self) -> NavPhase:
        if self.destination is None:
            return NavPhase.IDLE
        if self._paused:
            return NavPhase.PAUSED
        return NavPhase.SEEKING

    @property
    def state(self) -> NavigationState:
        last: Dict[str, Any] = {}
        if self._last_result is not None:
            last = {
                "success": self._last_result.success,
                "reason": self._last_result.reason,
                "length": len(self._last_result.path),
            }
        return NavigationState(
            phase=self.phase,
            destination=self.destination,
            path=[c.coord for c in self.path] if self.path is not None else None,
            following=self.following.player_id if self.following is not None else None,
            paused=self._paused,
            moved=self._moved,
            tick=self._tick,
            map_id=self._room.map_id,
            last_search=last,
        )

    def debug_state(self) -> Dict[str, Any]:
        state = self.state
        return {
            "phase": state.phase.value,
            "destination": list(state.destination) if state.destination else None,
            "path": [list(c) for c in state.path] if state.path is not None else None,
            "following": state.following,
            "paused": state.paused,
            "moved": state.moved,
            "tick": state.tick,
            "map_id": state.map_id,
            "last_search": state.last_search,
        }

    # ------------------------------------------------------------------
    # Tick handling
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """
        Advance one simulation step.

        Only every `movement_interval`-th tick does any work.
        """
        self._tick += 1

        if self._tick % self.config.movement_interval != 0:
            return

        try:
            self._step()
        except Exception:
            log.exception("Navigation step failed at tick %d", self._tick)

    def _step(self) -> None:
        grid = self._ensure_grid()
        if grid is None:
            return

        start = self._start_cell(grid)
        goal = self._goal_cell(grid)
        if start is None or goal is None:
            return

        if self._needs_search():
            self._recalculate(grid, start, goal)

        if self._paused:
            return

        if self.path:
            nxt = self.path.pop(0)
            self._emit_move(grid, nxt)

            # A listener may have stopped us during the move event.
            if self.path is not None and not self.path:
                self._stop(reached=True)
            return

        if self._last_result is not None and self._last_result.success:
            # Already standing on the goal cell.
            self._stop(reached=True)
        # Otherwise the goal is unreachable: the empty path is held and the
        # next acting tick searches again.

    def _needs_search(self) -> bool:
        if self._moved or self.path is None:
            return True
        if not self.path and not (self._last_result is not None and self._last_result.success):
            return True
        return self._tick % self.config.recalculate_every == 0

    def _ensure_grid(self) -> Optional[NavGrid]:
        map_id = self._room.map_id
        if map_id is None:
            return None
        try:
            return self._grids.get(map_id)
        except Exception:
            log.warning("Navigation grid for map %r unavailable", map_id, exc_info=True)
            return None

    def _start_cell(self, grid: NavGrid) -> Optional[GridCell]:
        position = self.position
        if position is None:
            return None
        return grid.nearest_cell(position[0], position[1])

    def _goal_cell(self, grid: NavGrid) -> Optional[GridCell]:
        if self.destination is None:
            return None
        return grid.nearest_cell(self.destination[0], self.destination[1])

    def _speed(self) -> Vec2:
        if self.config.speed is not None:
            return self.config.speed
        speed = self._room.player_speed
        return (speed, speed)

    def _emit_move(self, grid: NavGrid, cell: GridCell) -> None:
        """
        Announce and perform one step toward `cell`.

        The cell has already been consumed; a canceled move is not retried.
        """
        target = grid.world_position(cell)
        current = self.position or target
        dist = math.hypot(current[0] - target[0], current[1] - target[1])
        sx, sy = self._speed()
        velocity = (dist * sx, dist * sy)

        if self._emit(NavEventType.MOVE, {"position": target, "velocity": velocity}):
            self._room.move(target, velocity)
        else:
            log.debug("Move to %s rejected by listener", cell.coord)

    # ------------------------------------------------------------------
    # Path search
    # ------------------------------------------------------------------

    def recalculate(self) -> Optional[PathfindingResult]:
        """
        Force a new search from the current position to the destination.

        Returns None (and does nothing) when there is no grid, position or
        destination yet.
        """
        grid = self._ensure_grid()
        if grid is None:
            return None
        start = self._start_cell(grid)
        goal = self._goal_cell(grid)
        if start is None or goal is None:
            return None
        return self._recalculate(grid, start, goal)

    def _recalculate(self, grid: NavGrid, start: GridCell, goal: GridCell) -> PathfindingResult:
        grid.reset()
        result = find_path(grid, start, goal, max_steps=self.config.max_search_steps)

        self.path = list(result.path)
        self._last_result = result
        self._moved = False

        if not result.success:
            log.info(
                "No path from %s to %s (%s)", start.coord, goal.coord, result.reason
            )

        self._emit(
            NavEventType.RECALCULATE,
            {
                "path": [grid.world_position(c) for c in result.path],
                "success": result.success,
            },
        )
        return result

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def go(self, target: Any) -> Optional[Vec2]:
        """
        Navigate to a world position, a grid cell or a player.

        Players must be spawned; otherwise nothing happens. Returns the new
        destination, or None if the target could not be resolved.
        """
        if isinstance(target, GridCell):
            grid = self._ensure_grid()
            if grid is None:
                return None
            self._go(grid.world_position(target))
            return self.destination

        if isinstance(target, (tuple, list)) and len(target) == 2:
            self._go((float(target[0]), float(target[1])))
            return self.destination

        player = self._room.resolve_player(target)
        if player is not None and player.spawned:
            self._go(player.position)  # type: ignore[arg-type]
            return self.destination

        return None

    def go_to_vent(self, vent_id: Any) -> bool:
        """Navigate to a named vent of the current map from config."""
        profile = self.config.map_profile(self._room.map_id)
        if profile is None:
            return False
        position = profile.vents.get(str(vent_id))
        if position is None:
            return False
        self._go(position)
        return True

    def _go(self, destination: Vec2) -> None:
        # Copy so later changes to the caller's object are not picked up.
        self.destination = (float(destination[0]), float(destination[1]))
        self._moved = True
        self.start()

    def follow(self, player: Any) -> bool:
        """
        Track a spawned player. Destination updates arrive with that
        player's movement; this call does not set one.
        """
        resolved = self._room.resolve_player(player)
        if resolved is None or not resolved.spawned:
            return False
        self.following = resolved
        return True

    def unfollow(self) -> None:
        self.following = None

    def pause(self) -> None:
        self._paused = True
        self._emit(NavEventType.PAUSE, {})

    def start(self) -> None:
        """Resume movement (also emitted by go())."""
        self._paused = False
        self._emit(NavEventType.START, {"destination": self.destination})

    def stop(self) -> None:
        """Drop the destination without reaching it. Following is kept."""
        self._stop(reached=False)

    def _stop(self, reached: bool) -> None:
        self.destination = None
        self.path = None
        if not reached:
            self._moved = True

        self._emit(NavEventType.STOP, {"reached": reached})
        if reached:
            self._emit(NavEventType.END, {})

    # ------------------------------------------------------------------
    # Room notifications
    # ------------------------------------------------------------------

    def _handle_move(self, player: PlayerState, position: Vec2) -> None:
        if self.following is not None and player.player_id == self.following.player_id:
            self.destination = (float(position[0]), float(position[1]))
            self._moved = True
        elif self._room.is_local(player):
            self._moved = True

    def _handle_leave(self, player: PlayerState) -> None:
        if self.following is not None and player.player_id == self.following.player_id:
            self._stop(reached=False)
            self.following = None

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self, event_type: NavEventType, data: Dict[str, Any]) -> bool:
        accepted = self.events.emit(event_type, data)

        if self._bus is not None:
            payload = dict(data)
            if event_type is NavEventType.MOVE:
                payload["accepted"] = accepted
            log_event(
                bus=self._bus,
                module=self.MODULE,
                event_type=_MONITORING_TYPES[event_type],
                message=event_type.value,
                payload=payload,
            )
        return accepted
