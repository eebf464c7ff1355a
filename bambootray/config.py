"""Tray configuration: env-driven, read by the engine on every cycle.

Centralized settings using pydantic-settings.  Reads from a .env file and
BAMBOOTRAY_* environment variables.  Complex fields (``servers``, the
notification kind sets) are given as JSON.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from bambootray.models.notifications import NotificationKind


class BambooServer(BaseModel):
    """Connection details for one Bamboo server."""

    model_config = ConfigDict(frozen=True)

    name: str = "bamboo"
    url: str
    username: str = ""
    password: str = ""
    plan_keys: list[str] = []  # empty = monitor every plan the user can see


class TraySettings(BaseSettings):
    """Tray settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BAMBOOTRAY_POLL_INTERVAL_MS=15000
        export BAMBOOTRAY_SPOKEN_NOTIFICATIONS_ENABLED=true
        export BAMBOOTRAY_SERVERS='[{"name": "ci", "url": "https://ci.example.com"}]'

    Or via .env file::

        BAMBOOTRAY_VISUAL_NOTIFICATION_KINDS=["broken", "fixed"]
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BAMBOOTRAY_",
        env_file_encoding="utf-8",
    )

    # Polling
    poll_interval_ms: int = 30_000
    fetch_timeout_seconds: float = 10.0
    servers: list[BambooServer] = []

    # Tray icon animation
    animation_enabled: bool = True
    animation_frame_count: int = 4
    animation_interval_ms: int = 250

    # Balloon (visual) notifications
    visual_notifications_enabled: bool = True
    visual_notification_kinds: set[NotificationKind] = set(NotificationKind)
    balloon_timeout_ms: int = 5000

    # Speech notifications
    spoken_notifications_enabled: bool = False
    spoken_notification_kinds: set[NotificationKind] = {
        NotificationKind.BROKEN,
        NotificationKind.FIXED,
    }
    voice_id: str = ""  # empty = the speech sink's default voice

    # Observability
    log_level: str = "INFO"

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000.0

    @property
    def animation_interval_seconds(self) -> float:
        return self.animation_interval_ms / 1000.0


# Module-level singleton: import as `from bambootray.config import settings`
settings = TraySettings()
