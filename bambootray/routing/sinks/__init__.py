"""Sink protocols for bambootray notification routing.

Two channels exist: visual (toast/balloon) and spoken (speech synthesis).
Every sink has a ``sink_name`` property and an ``accept(payload)`` method.
The dispatcher calls ``accept`` on every registered sink of the channel.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from bambootray.models.notifications import SpokenNotification, VisualNotification


@runtime_checkable
class VisualSink(Protocol):
    """Protocol for toast/balloon renderers."""

    @property
    def sink_name(self) -> str:
        """Return the unique name of this sink."""
        ...

    def accept(self, notification: VisualNotification) -> None:
        """Show the notification.  May raise; the dispatcher logs and continues."""
        ...


@runtime_checkable
class SpokenSink(Protocol):
    """Protocol for speech synthesizers.

    A sink may additionally expose ``available_voices`` (a collection of
    voice ids).  When it does, the dispatcher skips the sink if the
    configured voice is not among them.
    """

    @property
    def sink_name(self) -> str:
        """Return the unique name of this sink."""
        ...

    def accept(self, notification: SpokenNotification) -> None:
        """Speak the utterance with ``notification.voice_id``."""
        ...
