"""Shared text for notification payloads.

Captions, messages and utterances are built here so the visual and spoken
channels stay consistent.
"""

from __future__ import annotations

from bambootray.models.notifications import NotificationEvent, NotificationKind

KIND_LABELS: dict[NotificationKind, str] = {
    NotificationKind.FIXED: "Fixed!",
    NotificationKind.BROKEN: "Broken!",
    NotificationKind.SUCCEEDED: "Build Successful!",
    NotificationKind.STILL_BROKEN: "Broken!",
}

KIND_MESSAGES: dict[NotificationKind, str] = {
    NotificationKind.FIXED: "Recent checkins have fixed the build.",
    NotificationKind.BROKEN: "Recent checkins have broken the build.",
    NotificationKind.SUCCEEDED: "Yet another successful build.",
    NotificationKind.STILL_BROKEN: "The build is still broken.",
}

CONNECTION_ERROR_CAPTION = "Server Connection Error"


def format_caption(event: NotificationEvent) -> str:
    """Return ``"<plan name>: <kind label>"``.

    Examples
    --------
    >>> from bambootray.models.notifications import Severity
    >>> format_caption(NotificationEvent(
    ...     plan_name="Core - Nightly",
    ...     kind=NotificationKind.FIXED,
    ...     severity=Severity.INFO,
    ... ))
    'Core - Nightly: Fixed!'
    """
    return f"{event.plan_name}: {KIND_LABELS[event.kind]}"


def format_message(event: NotificationEvent) -> str:
    return KIND_MESSAGES[event.kind]


def format_utterance(event: NotificationEvent) -> str:
    """Return ``"<plan name> reports <message>"``."""
    return f"{event.plan_name} reports {KIND_MESSAGES[event.kind]}"


def format_connection_error(error: BaseException) -> str:
    return f"Unable to connect to the server. Error: \n{error}"
