# rich-based TUI dashboard
#src/monitoring/dashboard_tui.py
"""
TUI dashboard for the navigation runtime.

A lightweight terminal UI (using `rich`) that subscribes to the monitoring
EventBus and renders:

- Navigation status:
    - Phase (idle / seeking / paused)
    - Destination
    - Arrivals and aborted runs

- Path:
    - Length and success of the last search
    - Next few waypoints

- Recent events:
    - Rolling log of the latest monitoring events

This runs entirely offline.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bus import EventBus, default_bus
from .events import EventType, MonitoringEvent


class TuiDashboard:
    """
    Live terminal dashboard bound to a monitoring.EventBus.

    Consumes MonitoringEvents into a small state dict that is rendered
    periodically via rich.
    """

    def __init__(self, bus: EventBus, *, history: int = 12) -> None:
        self._bus = bus
        self._console = Console()

        self._state: Dict[str, Any] = {
            "phase": "idle",
            "destination": None,
            "paused": False,
            "moves": 0,
            "rejected_moves": 0,
            "arrivals": 0,
            "aborted": 0,
            "recalculations": 0,
            "last_path": [],
            "last_search_ok": None,
            "last_position": None,
        }
        self._recent: Deque[MonitoringEvent] = deque(maxlen=history)

        self._bus.subscribe(self._on_event)

    @property
    def state(self) -> Dict[str, Any]:
        return self._state

    # --------------------------------------------------------
    # Event handler
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        """Update dashboard state; must stay cheap."""
        et = event.event_type
        payload = event.payload
        self._recent.append(event)

        if et == EventType.NAV_START:
            self._state["destination"] = payload.get("destination")
            self._state["paused"] = False
            self._state["phase"] = "seeking" if payload.get("destination") is not None else "idle"

        elif et == EventType.NAV_PAUSE:
            self._state["paused"] = True
            if self._state["destination"] is not None:
                self._state["phase"] = "paused"

        elif et == EventType.NAV_STOP:
            if payload.get("reached"):
                self._state["arrivals"] += 1
            else:
                self._state["aborted"] += 1
            self._state["destination"] = None
            self._state["last_path"] = []
            self._state["phase"] = "idle"

        elif et == EventType.NAV_MOVE:
            if payload.get("accepted", True):
                self._state["moves"] += 1
                self._state["last_position"] = payload.get("position")
            else:
                self._state["rejected_moves"] += 1
            if self._state["last_path"]:
                self._state["last_path"] = self._state["last_path"][1:]

        elif et == EventType.NAV_RECALCULATE:
            self._state["recalculations"] += 1
            self._state["last_path"] = list(payload.get("path") or [])
            self._state["last_search_ok"] = payload.get("success")

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def _render_status_panel(self) -> Panel:
        dest = self._state["destination"]
        txt = Text()
        txt.append("Phase: ", style="bold")
        txt.append(f"{self._state['phase']}\n")
        txt.append("Destination: ", style="bold")
        txt.append(f"{_fmt_point(dest)}\n")
        txt.append("Position: ", style="bold")
        txt.append(f"{_fmt_point(self._state['last_position'])}\n")
        txt.append("Arrivals / aborted: ", style="bold")
        txt.append(f"{self._state['arrivals']} / {self._state['aborted']}\n")
        return Panel(txt, title="Navigation", border_style="cyan")

    def _render_path_panel(self) -> Panel:
        path: List[Any] = self._state["last_path"]
        ok = self._state["last_search_ok"]

        table = Table.grid(pad_edge=False)
        table.add_column(justify="left")

        status = "<none>" if ok is None else ("found" if ok else "[bold red]unreachable[/bold red]")
        table.add_row(f"[bold]Last search:[/bold] {status}")
        table.add_row(f"[bold]Remaining:[/bold] {len(path)} cells")
        table.add_row(f"[bold]Searches:[/bold] {self._state['recalculations']}")
        table.add_row(
            f"[bold]Moves:[/bold] {self._state['moves']} "
            f"(rejected {self._state['rejected_moves']})"
        )

        if path:
            preview = " → ".join(_fmt_point(p) for p in path[:5])
            if len(path) > 5:
                preview += " → …"
            table.add_row("")
            table.add_row(preview)

        return Panel(table, title="Path", border_style="green")

    def _render_events_panel(self) -> Panel:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Time", width=8)
        table.add_column("Event", style="bold", width=16)
        table.add_column("Message")

        if self._recent:
            for evt in self._recent:
                table.add_row(
                    time.strftime("%H:%M:%S", time.localtime(evt.ts)),
                    evt.event_type.name,
                    evt.message,
                )
        else:
            table.add_row("-", "<none>", "")

        return Panel(table, title="Recent Events", border_style="magenta")

    def _build_layout(self) -> Layout:
        layout = Layout()
        layout.split(
            Layout(name="top", size=8),
            Layout(name="events", ratio=1),
        )
        layout["top"].split_row(
            Layout(name="status"),
            Layout(name="path"),
        )
        layout["status"].update(self._render_status_panel())
        layout["path"].update(self._render_path_panel())
        layout["events"].update(self._render_events_panel())
        return layout

    # --------------------------------------------------------
    # Main loop
    # --------------------------------------------------------

    def run(self, refresh_per_second: float = 4.0, duration: Optional[float] = None) -> None:
        """
        Render until interrupted, or for `duration` seconds.

        Blocks the current thread.
        """
        refresh_delay = 1.0 / max(refresh_per_second, 0.1)
        deadline = None if duration is None else time.monotonic() + duration
        with Live(self._build_layout(), console=self._console, refresh_per_second=refresh_per_second) as live:
            while deadline is None or time.monotonic() < deadline:
                live.update(self._build_layout())
                time.sleep(refresh_delay)


def _fmt_point(point: Any) -> str:
    if point is None:
        return "<none>"
    try:
        return f"({float(point[0]):.1f}, {float(point[1]):.1f})"
    except (TypeError, ValueError, IndexError):
        return str(point)


def run_dashboard_with_default_bus() -> None:
    """Spawn a dashboard bound to monitoring.bus.default_bus."""
    TuiDashboard(default_bus).run()


if __name__ == "__main__":
    run_dashboard_with_default_bus()
