"""Notification models: classified build transitions and their channel payloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class NotificationKind(str, Enum):
    """Classification of a build-completion transition."""

    FIXED = "fixed"
    BROKEN = "broken"
    SUCCEEDED = "succeeded"
    STILL_BROKEN = "still_broken"


class Severity(str, Enum):
    """Notification severity, mapped to the toast icon level."""

    INFO = "info"
    ERROR = "error"


SEVERITY_BY_KIND: dict[NotificationKind, Severity] = {
    NotificationKind.FIXED: Severity.INFO,
    NotificationKind.SUCCEEDED: Severity.INFO,
    NotificationKind.BROKEN: Severity.ERROR,
    NotificationKind.STILL_BROKEN: Severity.ERROR,
}


class NotificationEvent(BaseModel):
    """A classified transition for one plan.  Created and discarded within a cycle."""

    model_config = ConfigDict(frozen=True)

    plan_name: str
    kind: NotificationKind
    severity: Severity
    plan_key: str = ""


class VisualNotification(BaseModel):
    """Payload for the toast/balloon channel."""

    model_config = ConfigDict(frozen=True)

    caption: str
    message: str
    severity: Severity
    timeout_ms: int = 5000


class SpokenNotification(BaseModel):
    """Payload for the speech channel.  Empty ``voice_id`` means the default voice."""

    model_config = ConfigDict(frozen=True)

    utterance: str
    voice_id: str = ""
