"""Buffered sinks: queue notifications for a host UI to drain.

These sinks do not render or speak anything.  They store payloads until
``flush()`` is called, which makes them the bridge to a tray/GUI event
loop that polls for pending work, and convenient in tests.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from bambootray.models.notifications import SpokenNotification, VisualNotification

logger = logging.getLogger(__name__)


class BufferedVisualSink:
    """Collects visual notifications until flushed."""

    def __init__(self, name: str = "visual_buffer") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._pending: list[VisualNotification] = []

    @property
    def sink_name(self) -> str:
        return self._name

    def accept(self, notification: VisualNotification) -> None:
        with self._lock:
            self._pending.append(notification)
        logger.debug("%s: queued %r", self._name, notification.caption)

    def flush(self) -> list[VisualNotification]:
        """Return and clear all pending notifications."""
        with self._lock:
            pending = list(self._pending)
            self._pending.clear()
        return pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)


class BufferedSpeechSink:
    """Collects spoken notifications until flushed.

    Parameters
    ----------
    voices:
        Voice ids the host synthesizer can use.  ``None`` accepts any voice.
    """

    def __init__(
        self,
        voices: Iterable[str] | None = None,
        name: str = "speech_buffer",
    ) -> None:
        self._name = name
        self._voices = frozenset(voices) if voices is not None else None
        self._lock = threading.Lock()
        self._pending: list[SpokenNotification] = []

    @property
    def sink_name(self) -> str:
        return self._name

    @property
    def available_voices(self) -> frozenset[str] | None:
        return self._voices

    def accept(self, notification: SpokenNotification) -> None:
        with self._lock:
            self._pending.append(notification)
        logger.debug("%s: queued utterance %r", self._name, notification.utterance)

    def flush(self) -> list[SpokenNotification]:
        """Return and clear all pending utterances."""
        with self._lock:
            pending = list(self._pending)
            self._pending.clear()
        return pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)
