"""Shared option handling: merge command-line overrides into TraySettings."""

from __future__ import annotations

from typing import List, Optional

from bambootray.config import BambooServer, TraySettings, settings as default_settings


def resolve_settings(
    server_url: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    plan_keys: Optional[List[str]] = None,
    interval: Optional[float] = None,
    speak: Optional[bool] = None,
    base: Optional[TraySettings] = None,
) -> TraySettings:
    """Return settings with any given command-line values applied.

    ``--server`` replaces the configured server list with a single server.
    """
    base = base or default_settings
    update: dict = {}

    if server_url:
        update["servers"] = [
            BambooServer(
                name="bamboo",
                url=server_url,
                username=username or "",
                password=password or "",
                plan_keys=list(plan_keys or []),
            )
        ]
    elif plan_keys:
        update["servers"] = [
            server.model_copy(update={"plan_keys": list(plan_keys)})
            for server in base.servers
        ]

    if interval is not None:
        update["poll_interval_ms"] = int(interval * 1000)
    if speak is not None:
        update["spoken_notifications_enabled"] = speak

    return base.model_copy(update=update) if update else base
