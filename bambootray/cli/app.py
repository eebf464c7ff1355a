"""Main Typer application: imports and registers all CLI commands.

Entry point: ``bambootray`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from bambootray import __version__
from bambootray.cli.commands.status_cmd import status_cmd
from bambootray.cli.commands.watch_cmd import watch_cmd
from bambootray.config import settings

app = typer.Typer(
    name="bambootray",
    help="bambootray: watch Bamboo build plans and announce finished builds.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    """Route library logging through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        settings.log_level,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    configure_logging(log_level)


# Register subcommands
app.command(name="watch", help="Poll the build server and show live plan state.")(watch_cmd)
app.command(name="status", help="Fetch plan state once and print it.")(status_cmd)


@app.command(name="version", help="Show the bambootray version.")
def version_cmd() -> None:
    """Print the installed version."""
    Console().print(f"bambootray {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
