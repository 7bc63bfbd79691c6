#src/monitoring/tools.py
"""
Human-facing utilities for navigation monitoring logs.

Provides:

- Run inspector:
    - Load JSONL logs written by JsonFileLogger.
    - Split them into navigation runs (one run per destination, from
      pathfinding.start to the stop that ends it).
    - Summarize moves, searches and how the run ended.

- Event filter:
    - Print the raw events of one or more EventTypes.

- State dumper:
    - Export a JSON bundle built from MovementController.debug_state().

Example usage:

    python -m monitoring.tools inspect-runs --log-path logs/nav/events.log -n 3
    python -m monitoring.tools events --type NAV_RECALCULATE --type NAV_STOP
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .events import EventType, MonitoringEvent


JsonDict = Dict[str, Any]


# ============================================================
# Log loading
# ============================================================

def load_monitoring_events(path: Path) -> List[MonitoringEvent]:
    """
    Load MonitoringEvents from a JSONL file produced by JsonFileLogger.

    Lines that are not valid JSON or name an unknown event type are skipped.
    """
    if not path.exists():
        return []

    events: List[MonitoringEvent] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(data, dict):
                continue
            try:
                events.append(MonitoringEvent.from_dict(data))
            except ValueError:
                continue
    return events


# ============================================================
# Run inspector
# ============================================================

@dataclass
class RunSummary:
    """
    Human-friendly summary of one navigation run reconstructed from logs.

    `outcome` is "arrived", "stopped" or "open" (log ends mid-run).
    """
    index: int
    started_at: float
    destination: Optional[List[float]]
    moves: int = 0
    rejected_moves: int = 0
    searches: int = 0
    failed_searches: int = 0
    pauses: int = 0
    outcome: str = "open"
    ended_at: Optional[float] = None
    retargets: List[Any] = field(default_factory=list)

    @property
    def duration(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return self.ended_at - self.started_at

    def to_dict(self) -> JsonDict:
        data = asdict(self)
        data["duration"] = self.duration
        return data


def split_runs(events: Iterable[MonitoringEvent]) -> List[RunSummary]:
    """
    Fold navigation events into runs.

    A NAV_START with a new destination while a run is open counts as a
    re-target of that run; a NAV_START after a resume (same destination)
    does not. Events outside any run are ignored.
    """
    runs: List[RunSummary] = []
    current: Optional[RunSummary] = None

    for evt in events:
        payload = evt.payload or {}
        et = evt.event_type

        if et == EventType.NAV_START:
            destination = _as_list(payload.get("destination"))
            if current is None:
                current = RunSummary(
                    index=len(runs),
                    started_at=evt.ts,
                    destination=destination,
                )
                runs.append(current)
            elif destination != current.destination:
                current.retargets.append(destination)
                current.destination = destination
            continue

        if current is None:
            continue

        if et == EventType.NAV_MOVE:
            if payload.get("accepted", True):
                current.moves += 1
            else:
                current.rejected_moves += 1

        elif et == EventType.NAV_RECALCULATE:
            current.searches += 1
            if not payload.get("success", False):
                current.failed_searches += 1

        elif et == EventType.NAV_PAUSE:
            current.pauses += 1

        elif et == EventType.NAV_STOP:
            current.outcome = "arrived" if payload.get("reached") else "stopped"
            current.ended_at = evt.ts
            current = None

    return runs


def load_last_n_run_summaries(log_path: Path, last_n: int) -> List[RunSummary]:
    """Load the last N navigation runs from a monitoring JSONL file, newest first."""
    runs = split_runs(load_monitoring_events(log_path))
    return list(reversed(runs))[:last_n]


def filter_events(
    events: Iterable[MonitoringEvent],
    types: Optional[Sequence[EventType]] = None,
    module: Optional[str] = None,
) -> List[MonitoringEvent]:
    """Events matching any of `types` (all when empty) and an optional module prefix."""
    wanted = set(types or ())
    out: List[MonitoringEvent] = []
    for evt in events:
        if wanted and evt.event_type not in wanted:
            continue
        if module is not None and not evt.module.startswith(module):
            continue
        out.append(evt)
    return out


# ============================================================
# State dumper
# ============================================================

def build_state_bundle(nav_state: JsonDict, recent: Optional[List[MonitoringEvent]] = None) -> JsonDict:
    """
    Construct a JSON bundle with the controller state and recent events.

    nav_state is expected to come from MovementController.debug_state().
    """
    return {
        "meta": {
            "built_at": time.time(),
        },
        "nav_state": nav_state,
        "destination": nav_state.get("destination"),
        "path": nav_state.get("path"),
        "recent_events": [e.to_dict() for e in (recent or [])],
    }


def save_state_bundle(path: Path, bundle: JsonDict) -> None:
    """Persist a state bundle as pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(bundle, f, indent=2, sort_keys=True)


def _as_list(point: Any) -> Optional[List[float]]:
    if point is None:
        return None
    try:
        return [float(point[0]), float(point[1])]
    except (TypeError, ValueError, IndexError):
        return None


# ============================================================
# CLI
# ============================================================

def _cmd_inspect_runs(args: argparse.Namespace) -> None:
    summaries = load_last_n_run_summaries(Path(args.log_path), last_n=args.n)
    json.dump([s.to_dict() for s in summaries], sys.stdout, indent=2, sort_keys=True)
    print()


def _cmd_events(args: argparse.Namespace) -> None:
    try:
        types = [EventType[name] for name in (args.type or [])]
    except KeyError as exc:
        print(f"Unknown event type: {exc.args[0]}", file=sys.stderr)
        sys.exit(2)

    events = filter_events(
        load_monitoring_events(Path(args.log_path)),
        types=types,
        module=args.module,
    )
    for evt in events:
        print(json.dumps(evt.to_dict(), ensure_ascii=False, default=repr))


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the monitoring CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="gridnav-monitor",
        description="Inspect navigation monitoring logs.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_runs = sub.add_parser("inspect-runs", help="Summarize the last N navigation runs.")
    p_runs.add_argument(
        "--log-path",
        type=str,
        default="logs/nav/events.log",
        help="Path to monitoring JSONL log file.",
    )
    p_runs.add_argument(
        "-n",
        type=int,
        default=5,
        help="Number of recent runs to show.",
    )
    p_runs.set_defaults(func=_cmd_inspect_runs)

    p_events = sub.add_parser("events", help="Print raw events, optionally filtered.")
    p_events.add_argument(
        "--log-path",
        type=str,
        default="logs/nav/events.log",
        help="Path to monitoring JSONL log file.",
    )
    p_events.add_argument(
        "--type",
        action="append",
        help="EventType name (repeatable), e.g. NAV_MOVE.",
    )
    p_events.add_argument(
        "--module",
        type=str,
        default=None,
        help="Only events whose module starts with this prefix.",
    )
    p_events.set_defaults(func=_cmd_events)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the monitoring CLI."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        sys.exit(1)
    func(args)


if __name__ == "__main__":
    main()
