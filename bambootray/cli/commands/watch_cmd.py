"""``bambootray watch``: poll the build server and show live plan state.

Runs the monitor engine with console notification sinks and a Rich Live
plan table.  Press Ctrl+C to stop.
"""

from __future__ import annotations

import threading
import time
from typing import List, Optional

import typer
from rich.console import Console
from rich.live import Live

from bambootray.cli.commands._settings import resolve_settings
from bambootray.client.bamboo import fetcher_from_settings
from bambootray.core.engine import MonitorEngine
from bambootray.errors import ConfigError, FetchError
from bambootray.models.aggregate import AggregateState
from bambootray.models.plans import Snapshot
from bambootray.monitor.renderer import TrayRenderer
from bambootray.routing.dispatcher import NotificationDispatcher
from bambootray.routing.sinks.console import ConsoleSpeechSink, ConsoleVisualSink

console = Console()


class LiveView:
    """Keeps the latest engine outputs and redraws the Live display."""

    def __init__(self, renderer: TrayRenderer) -> None:
        self.renderer = renderer
        self.live: Live | None = None
        self.engine: MonitorEngine | None = None
        self._snapshot = Snapshot()
        self._state = AggregateState()
        self._error: FetchError | None = None
        self._lock = threading.Lock()

    def on_snapshot(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshot = snapshot
            self._error = None

    def on_state(self, state: AggregateState) -> None:
        with self._lock:
            self._state = state
        self.refresh()

    def on_error(self, error: FetchError) -> None:
        with self._lock:
            self._error = error

    def refresh(self) -> None:
        if self.live is None:
            return
        with self._lock:
            icon = self.engine.icon if self.engine is not None else None
            panel = self.renderer.render(
                self._snapshot, self._state, icon=icon, error=self._error
            )
        self.live.update(panel)


def watch_cmd(
    server_url: Optional[str] = typer.Option(
        None,
        "--server",
        "-s",
        help="Bamboo server URL (overrides BAMBOOTRAY_SERVERS).",
    ),
    username: Optional[str] = typer.Option(None, "--user", "-u", help="Bamboo username."),
    password: Optional[str] = typer.Option(
        None, "--password", envvar="BAMBOOTRAY_PASSWORD", help="Bamboo password."
    ),
    plan_keys: Optional[List[str]] = typer.Option(
        None,
        "--plan",
        "-p",
        help="Plan key to monitor (repeatable).  Default: all plans.",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        "-i",
        help="Poll interval in seconds.",
    ),
    speak: Optional[bool] = typer.Option(
        None,
        "--speak/--no-speak",
        help="Enable or disable spoken notifications.",
    ),
) -> None:
    """Poll the build server and show live plan state until Ctrl+C.

    Finished builds are announced on the console according to the
    notification settings.
    """
    settings = resolve_settings(server_url, username, password, plan_keys, interval, speak)
    if not settings.servers:
        console.print("[bold red]No Bamboo server configured.[/bold red]")
        console.print("[dim]Pass --server URL or set BAMBOOTRAY_SERVERS.[/dim]")
        raise typer.Exit(code=1)

    dispatcher = NotificationDispatcher()
    dispatcher.register_visual_sink(ConsoleVisualSink(console))
    dispatcher.register_spoken_sink(ConsoleSpeechSink(console))

    view = LiveView(TrayRenderer(console=console))
    engine = MonitorEngine(
        fetcher_from_settings(settings),
        settings,
        dispatcher=dispatcher,
        on_snapshot_updated=view.on_snapshot,
        on_aggregate_state_changed=view.on_state,
        on_connection_error=view.on_error,
    )
    view.engine = engine

    console.print(
        f"[dim]Polling {len(settings.servers)} server(s) every "
        f"{settings.poll_interval_seconds:g}s. Press Ctrl+C to exit.[/dim]"
    )

    with Live(console=console, refresh_per_second=4, transient=False) as live:
        view.live = live
        view.refresh()
        try:
            engine.start()
        except ConfigError as exc:
            console.print(f"[bold red]Invalid configuration:[/bold red] {exc}")
            raise typer.Exit(code=1)
        try:
            while True:
                time.sleep(0.5)
        except KeyboardInterrupt:
            pass
        finally:
            engine.stop()
