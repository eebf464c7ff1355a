"""``bambootray status``: fetch once and print the plan table."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from bambootray.cli.commands._settings import resolve_settings
from bambootray.client.bamboo import fetcher_from_settings
from bambootray.core.aggregator import Aggregator
from bambootray.errors import FetchError
from bambootray.monitor.renderer import TrayRenderer

console = Console()


def status_cmd(
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
        help="Plan key to show (repeatable).  Default: all plans.",
    ),
) -> None:
    """Fetch plan state once and print it.

    Exits with code 1 if the server cannot be reached and 2 if any
    monitored plan is broken.
    """
    settings = resolve_settings(server_url, username, password, plan_keys)
    if not settings.servers:
        console.print("[bold red]No Bamboo server configured.[/bold red]")
        console.print("[dim]Pass --server URL or set BAMBOOTRAY_SERVERS.[/dim]")
        raise typer.Exit(code=1)

    try:
        snapshot = fetcher_from_settings(settings)()
    except FetchError as exc:
        console.print(f"[bold red]Server connection error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    state = Aggregator().update(snapshot)
    TrayRenderer(console=console).print(snapshot, state)

    if state.broken:
        raise typer.Exit(code=2)
