"""Rich terminal renderer for bambootray.

Turns a ``Snapshot`` plus the current ``AggregateState`` into Rich
renderables: a plan table with one row per plan and a tray indicator in
the panel title.

Color scheme
------------
- green       : Successful
- red         : Failed
- yellow      : Building (animated while the aggregate state is building)
- dim         : Offline / unknown
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bambootray.models.aggregate import AggregateState, TrayIcon
from bambootray.models.plans import BUILDING, FAILED, OFFLINE, SUCCESSFUL, Snapshot

# ---------------------------------------------------------------------------
# Row / tray -> Rich style mapping
# ---------------------------------------------------------------------------

_ROW_STYLES: dict[str, str] = {
    SUCCESSFUL: "bold green",
    FAILED: "bold red",
    BUILDING: "bold yellow",
    OFFLINE: "dim",
}

_TRAY_STYLES: dict[TrayIcon, str] = {
    TrayIcon.IDLE: "dim",
    TrayIcon.OFFLINE: "dim",
    TrayIcon.BUILDING: "bold yellow",
    TrayIcon.HEALTHY: "bold green",
    TrayIcon.BROKEN: "bold red",
}

_TRAY_LABELS: dict[TrayIcon, str] = {
    TrayIcon.IDLE: "WAITING",
    TrayIcon.OFFLINE: "OFFLINE",
    TrayIcon.BUILDING: "BUILDING",
    TrayIcon.HEALTHY: "HEALTHY",
    TrayIcon.BROKEN: "BROKEN",
}

# One glyph per animation frame; frames beyond this list wrap around.
_BUILDING_FRAMES = ("◐", "◓", "◑", "◒")


def tray_indicator(state: AggregateState, icon: TrayIcon | None = None) -> Text:
    """Return the tray indicator as styled text.

    *icon* overrides ``state.icon`` (the engine reports ``IDLE`` before
    the first fetch).
    """
    icon = icon or state.icon
    style = _TRAY_STYLES[icon]
    if icon is TrayIcon.BUILDING:
        glyph = _BUILDING_FRAMES[state.animation_frame % len(_BUILDING_FRAMES)]
    else:
        glyph = "●"
    return Text(f"{glyph} {_TRAY_LABELS[icon]}", style=style)


class TrayRenderer:
    """Renders plans and aggregate state as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(
        self,
        snapshot: Snapshot,
        state: AggregateState,
        *,
        icon: TrayIcon | None = None,
        error: BaseException | None = None,
    ) -> Panel:
        """Render the plan table in a Panel titled with the tray indicator.

        While offline every row is shown with the Offline indicator, and
        *error* (if given) is shown under the table.
        """
        offline = state.offline
        table = self._build_plan_table(snapshot, offline=offline)

        parts: list = [table]
        if offline and error is not None:
            parts.append(Text(""))
            parts.append(Text(f"Connection error: {error}", style="red"))

        title = Text.assemble("bambootray  ", tray_indicator(state, icon))
        return Panel(
            Group(*parts),
            title=title,
            subtitle=f"Updated: {snapshot.captured_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
            border_style="blue",
            padding=(1, 2),
        )

    def _build_plan_table(self, snapshot: Snapshot, *, offline: bool = False) -> Table:
        table = Table(
            show_header=True,
            header_style="bold cyan",
            expand=True,
            show_lines=False,
            pad_edge=True,
        )
        table.add_column("", width=2)
        table.add_column("Server", style="dim")
        table.add_column("Project")
        table.add_column("Plan", min_width=20)
        table.add_column("Activity")
        table.add_column("Status")
        table.add_column("Last Build")
        table.add_column("Duration")
        table.add_column("#", justify="right")
        table.add_column("Revision")
        table.add_column("Passed", justify="right")
        table.add_column("Failed", justify="right")

        if not snapshot.plans:
            table.add_row("", Text("No plans", style="dim"))
            return table

        for plan in snapshot.plans:
            row_icon = OFFLINE if offline else plan.row_icon
            style = _ROW_STYLES.get(row_icon, "")
            table.add_row(
                Text("●", style=style),
                plan.server_name,
                plan.project_name,
                Text(f"{plan.short_plan_name or plan.plan_name}  ({plan.plan_key})", style=style),
                plan.build_activity,
                plan.build_status,
                plan.last_build_time,
                plan.last_build_duration,
                plan.last_build_number,
                plan.last_vcs_revision,
                plan.successful_test_count,
                plan.failed_test_count,
            )
        return table

    def print(self, snapshot: Snapshot, state: AggregateState) -> None:
        """Print a single rendering to the console."""
        self.console.print(self.render(snapshot, state))
