"""NotificationDispatcher: routes classified events to the visual and spoken channels.

Each event produces at most two side effects: one visual notification and
one spoken notification, each gated by its own enabled flag and kind set.
Sink failures are logged and never propagate; a broken sink must not stop
the polling loop.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Union

from bambootray.errors import ConfigError
from bambootray.models.aggregate import TrayIcon
from bambootray.models.notifications import (
    NotificationEvent,
    Severity,
    SpokenNotification,
    VisualNotification,
)
from bambootray.routing.sinks._formatting import (
    CONNECTION_ERROR_CAPTION,
    format_caption,
    format_connection_error,
    format_message,
    format_utterance,
)

if TYPE_CHECKING:
    from bambootray.config import TraySettings
    from bambootray.routing.sinks import SpokenSink, VisualSink

logger = logging.getLogger(__name__)

Notification = Union[VisualNotification, SpokenNotification]


class NotificationDispatcher:
    """Filters events against settings and fans them out to registered sinks.

    Usage
    -----
    >>> dispatcher = NotificationDispatcher()
    >>> dispatcher.register_visual_sink(console_sink)
    >>> dispatcher.register_spoken_sink(speech_sink)
    >>> dispatcher.dispatch(events, settings)
    """

    def __init__(self) -> None:
        self._visual_sinks: list[VisualSink] = []
        self._spoken_sinks: list[SpokenSink] = []
        self._reported_voices: set[tuple[str, str]] = set()

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def register_visual_sink(self, sink: VisualSink) -> None:
        """Register a toast/balloon sink.  Duplicates are ignored."""
        if sink not in self._visual_sinks:
            self._visual_sinks.append(sink)
            logger.info("Registered visual sink: %s", sink.sink_name)

    def register_spoken_sink(self, sink: SpokenSink) -> None:
        """Register a speech sink.  Duplicates are ignored."""
        if sink not in self._spoken_sinks:
            self._spoken_sinks.append(sink)
            logger.info("Registered spoken sink: %s", sink.sink_name)

    def unregister_sink(self, sink: VisualSink | SpokenSink) -> None:
        """Remove a sink from whichever channel it was registered on."""
        for sinks in (self._visual_sinks, self._spoken_sinks):
            if sink in sinks:
                sinks.remove(sink)
                logger.info("Unregistered sink: %s", sink.sink_name)

    @property
    def visual_sinks(self) -> list[VisualSink]:
        return list(self._visual_sinks)

    @property
    def spoken_sinks(self) -> list[SpokenSink]:
        return list(self._spoken_sinks)

    # ------------------------------------------------------------------
    # Plan events
    # ------------------------------------------------------------------

    def dispatch(
        self, events: Iterable[NotificationEvent], settings: TraySettings
    ) -> list[Notification]:
        """Route *events* according to *settings*.

        Returns the payloads that were emitted, in order.  A payload counts
        as emitted once its channel and kind pass the filters, regardless
        of individual sink failures.
        """
        emitted: list[Notification] = []
        for event in events:
            if (
                settings.visual_notifications_enabled
                and event.kind in settings.visual_notification_kinds
            ):
                visual = VisualNotification(
                    caption=format_caption(event),
                    message=format_message(event),
                    severity=event.severity,
                    timeout_ms=settings.balloon_timeout_ms,
                )
                self._deliver(self._visual_sinks, visual)
                emitted.append(visual)

            if (
                settings.spoken_notifications_enabled
                and event.kind in settings.spoken_notification_kinds
            ):
                spoken = SpokenNotification(
                    utterance=format_utterance(event),
                    voice_id=settings.voice_id,
                )
                self._deliver(self._voiced_sinks(settings.voice_id), spoken)
                emitted.append(spoken)

        return emitted

    # ------------------------------------------------------------------
    # Connection errors
    # ------------------------------------------------------------------

    def dispatch_connection_error(
        self,
        error: BaseException,
        settings: TraySettings,
        previous_icon: TrayIcon,
    ) -> VisualNotification | None:
        """Notify once on the transition into offline.

        Nothing is emitted if *previous_icon* is already ``OFFLINE``.  Neither
        the visual enabled flag nor the visual kind set applies.
        """
        if previous_icon is TrayIcon.OFFLINE:
            logger.debug("Already offline; suppressing connection error notification")
            return None

        notification = VisualNotification(
            caption=CONNECTION_ERROR_CAPTION,
            message=format_connection_error(error),
            severity=Severity.ERROR,
            timeout_ms=settings.balloon_timeout_ms,
        )
        self._deliver(self._visual_sinks, notification)
        return notification

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _voiced_sinks(self, voice_id: str) -> list[SpokenSink]:
        """Return spoken sinks able to use *voice_id*.

        An unknown voice disables the sink rather than failing; the problem
        is logged once per sink and voice.
        """
        usable: list[SpokenSink] = []
        for sink in self._spoken_sinks:
            voices = getattr(sink, "available_voices", None)
            if voice_id and voices is not None and voice_id not in voices:
                key = (sink.sink_name, voice_id)
                if key not in self._reported_voices:
                    self._reported_voices.add(key)
                    logger.warning(
                        "Speech disabled for %s: %s",
                        sink.sink_name,
                        ConfigError(f"voice {voice_id!r} is not available"),
                    )
                continue
            usable.append(sink)
        return usable

    def _deliver(self, sinks: Iterable[VisualSink | SpokenSink], payload: Notification) -> None:
        for sink in sinks:
            try:
                sink.accept(payload)
            except Exception as exc:  # noqa: BLE001
                logger.error("Sink %s failed: %s", sink.sink_name, exc)
