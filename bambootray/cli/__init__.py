"""bambootray CLI: Typer-based command-line interface.

Provides the ``bambootray`` command with subcommands for live watching
(``watch``) and one-shot status checks (``status``).

All output uses Rich for formatted terminal display.
"""
