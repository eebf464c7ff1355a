"""bambootray data models: all Pydantic v2, all frozen (immutable)."""

from bambootray.models.aggregate import AggregateState, TrayIcon
from bambootray.models.notifications import (
    SEVERITY_BY_KIND,
    NotificationEvent,
    NotificationKind,
    Severity,
    SpokenNotification,
    VisualNotification,
)
from bambootray.models.plans import BuildPlan, Snapshot

__all__ = [
    # plans
    "BuildPlan",
    "Snapshot",
    # notifications
    "NotificationKind",
    "Severity",
    "SEVERITY_BY_KIND",
    "NotificationEvent",
    "VisualNotification",
    "SpokenNotification",
    # aggregate
    "AggregateState",
    "TrayIcon",
]
