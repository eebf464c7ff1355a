"""Aggregate tray state: one combined display state across all plans."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TrayIcon(str, Enum):
    """Tray indicator selected from the aggregate state."""

    IDLE = "idle"
    BUILDING = "building"
    HEALTHY = "healthy"
    BROKEN = "broken"
    OFFLINE = "offline"


class AggregateState(BaseModel):
    """Combined state derived from the current snapshot.

    Precedence for the tray icon: offline > building > broken > healthy.
    ``animation_frame`` is only meaningful while ``building`` is true.
    """

    model_config = ConfigDict(frozen=True)

    building: bool = False
    broken: bool = False
    offline: bool = False
    animation_frame: int = 0

    @property
    def icon(self) -> TrayIcon:
        if self.offline:
            return TrayIcon.OFFLINE
        if self.building:
            return TrayIcon.BUILDING
        if self.broken:
            return TrayIcon.BROKEN
        return TrayIcon.HEALTHY
