"""Rich console sinks: print notifications to the terminal.

Used by ``bambootray watch``.  Severity maps to colour: info is green,
error is bold red.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from bambootray.models.notifications import (
    Severity,
    SpokenNotification,
    VisualNotification,
)

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.INFO: "bold green",
    Severity.ERROR: "bold red",
}


class ConsoleVisualSink:
    """Prints each visual notification as a one-line banner."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    @property
    def sink_name(self) -> str:
        return "console"

    def accept(self, notification: VisualNotification) -> None:
        style = _SEVERITY_STYLES.get(notification.severity, "")
        self.console.print(
            Text.assemble((notification.caption, style), " ", notification.message)
        )


class ConsoleSpeechSink:
    """Prints utterances instead of speaking them."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    @property
    def sink_name(self) -> str:
        return "console_speech"

    def accept(self, notification: SpokenNotification) -> None:
        voice = notification.voice_id or "default"
        self.console.print(
            Text.assemble((f"({voice})", "cyan"), " ", (notification.utterance, "italic"))
        )
