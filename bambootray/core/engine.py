"""Monitor engine: the central coordinator for bambootray.

The engine wires the Poller, Differ, Aggregator and NotificationDispatcher
into one cycle and publishes the results through plain-callable output
ports.  It never depends on a rendering technology.

All state transitions (snapshot completion, connection errors, animation
ticks) run under one re-entrant lock, so they form a single logical
timeline regardless of which thread delivered them.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor
from typing import Any

from bambootray.config import TraySettings
from bambootray.core.aggregator import Aggregator
from bambootray.core.differ import diff_snapshots
from bambootray.core.poller import PlanFetcher, Poller
from bambootray.core.scheduler import PeriodicTimer
from bambootray.errors import ConfigError, FetchError
from bambootray.models.aggregate import AggregateState, TrayIcon
from bambootray.models.plans import Snapshot
from bambootray.routing.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class MonitorEngine:
    """Polls a build server and turns plan changes into tray state and notifications.

    Parameters
    ----------
    fetcher:
        Returns the current plans; raises ``FetchError`` on failure.
    settings:
        Tray settings.  Read on every cycle, so replacing ``engine.settings``
        takes effect from the next cycle (poll interval: on next ``start()``).
    dispatcher:
        Notification dispatcher with sinks registered.  A bare one is
        created if not provided.
    on_snapshot_updated, on_aggregate_state_changed, on_connection_error:
        Output ports for the presentation layer.  Exceptions they raise
        are logged and swallowed.
    executor:
        Executor for fetch calls (see ``Poller``).
    """

    def __init__(
        self,
        fetcher: PlanFetcher,
        settings: TraySettings | None = None,
        *,
        dispatcher: NotificationDispatcher | None = None,
        on_snapshot_updated: Callable[[Snapshot], Any] | None = None,
        on_aggregate_state_changed: Callable[[AggregateState], Any] | None = None,
        on_connection_error: Callable[[FetchError], Any] | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.settings = settings or TraySettings()
        self.dispatcher = dispatcher or NotificationDispatcher()

        self._lock = threading.RLock()
        self.poller = Poller(fetcher, lock=self._lock, executor=executor)
        self.aggregator = Aggregator()

        self._on_snapshot_updated = on_snapshot_updated
        self._on_aggregate_state_changed = on_aggregate_state_changed
        self._on_connection_error = on_connection_error

        self._displayed_icon = TrayIcon.IDLE
        self._animation_timer: PeriodicTimer | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> AggregateState:
        return self.aggregator.state

    @property
    def icon(self) -> TrayIcon:
        """The tray icon currently displayed (``IDLE`` until the first fetch)."""
        return self._displayed_icon

    @property
    def animating(self) -> bool:
        return self._animation_timer is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start polling.  The first fetch is issued immediately.

        Raises
        ------
        ConfigError
            If the configured poll interval is not positive.
        """
        self.poller.start(
            self.settings.poll_interval_seconds,
            self._handle_snapshot,
            self._handle_error,
        )

    def stop(self) -> None:
        """Stop polling and animation.  In-flight results are discarded."""
        self.poller.stop()
        with self._lock:
            timer, self._animation_timer = self._animation_timer, None
        if timer is not None:
            timer.stop()

    def poll_now(self) -> bool:
        """Issue a fetch outside the schedule (no-op if one is in flight)."""
        return self.poller.tick()

    # ------------------------------------------------------------------
    # Cycle handling (called by the poller under the state lock)
    # ------------------------------------------------------------------

    def _handle_snapshot(self, snapshot: Snapshot) -> None:
        settings = self.settings
        events = diff_snapshots(self.poller.previous, snapshot)
        state = self.aggregator.update(snapshot)

        self._publish(self._on_snapshot_updated, snapshot)
        if events:
            logger.info(
                "%d build(s) finished: %s",
                len(events),
                ", ".join(f"{e.plan_name} {e.kind.value}" for e in events),
            )
        self.dispatcher.dispatch(events, settings)
        self._apply_state(state)

    def _handle_error(self, error: FetchError) -> None:
        previous_icon = self._displayed_icon
        state = self.aggregator.mark_offline()

        self._publish(self._on_connection_error, error)
        self.dispatcher.dispatch_connection_error(error, self.settings, previous_icon)
        self._apply_state(state)

    # ------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------

    def animation_tick(self) -> AggregateState:
        """Advance the building animation by one frame and publish it."""
        with self._lock:
            before = self.aggregator.state
            state = self.aggregator.tick(
                self.settings.animation_enabled,
                self.settings.animation_frame_count,
            )
            if state != before:
                self._publish(self._on_aggregate_state_changed, state)
            return state

    def _sync_animation(self, building: bool) -> None:
        if building and self._animation_timer is None and self.poller.running:
            try:
                timer = PeriodicTimer(
                    self.settings.animation_interval_seconds,
                    self.animation_tick,
                    name="bambootray-animation",
                )
            except ConfigError as exc:
                logger.warning("Animation disabled: %s", exc)
                return
            self._animation_timer = timer
            timer.start()
        elif not building and self._animation_timer is not None:
            timer, self._animation_timer = self._animation_timer, None
            timer.stop(wait=False)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_state(self, state: AggregateState) -> None:
        self._displayed_icon = state.icon
        self._sync_animation(state.building)
        self._publish(self._on_aggregate_state_changed, state)

    def _publish(self, port: Callable[[Any], Any] | None, value: Any) -> None:
        if port is None:
            return
        try:
            port(value)
        except Exception:  # noqa: BLE001
            logger.exception("Output port %r failed", port)
