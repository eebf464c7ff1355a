"""Aggregate state computation and tray icon animation.

Snapshot recomputation (``update``) runs on the poll cadence; ``tick``
advances the animation on its own, faster cadence.  Offline is entered
only through ``mark_offline`` and cleared by the next snapshot.
"""

from __future__ import annotations

import logging

from bambootray.errors import ConfigError
from bambootray.models.aggregate import AggregateState
from bambootray.models.plans import Snapshot

logger = logging.getLogger(__name__)


def next_frame(frame: int, building: bool, enabled: bool, frame_count: int) -> int:
    """Return the animation frame after one tick.

    Advances by one modulo *frame_count* while building with animation
    enabled, otherwise resets to 0.

    Raises
    ------
    ConfigError
        If *frame_count* is less than 1.
    """
    if frame_count < 1:
        raise ConfigError(f"animation frame count must be >= 1, got {frame_count}")
    if building and enabled:
        return (frame + 1) % frame_count
    return 0


class Aggregator:
    """Holds the current ``AggregateState`` and its animation counter."""

    def __init__(self) -> None:
        self._state = AggregateState()
        self._bad_frame_count: int | None = None

    @property
    def state(self) -> AggregateState:
        return self._state

    def update(self, snapshot: Snapshot) -> AggregateState:
        """Recompute from *snapshot*.  Clears offline; keeps the frame while building."""
        building = snapshot.building
        self._state = AggregateState(
            building=building,
            broken=snapshot.broken,
            offline=False,
            animation_frame=self._state.animation_frame if building else 0,
        )
        return self._state

    def mark_offline(self) -> AggregateState:
        """Enter the offline state.  Building is forced off and animation suspended."""
        self._state = AggregateState(
            building=False,
            broken=self._state.broken,
            offline=True,
            animation_frame=0,
        )
        return self._state

    def tick(self, enabled: bool, frame_count: int) -> AggregateState:
        """Advance the animation by one frame.

        An invalid *frame_count* disables animation (frame stays 0) and is
        logged once per distinct bad value.
        """
        try:
            frame = next_frame(
                self._state.animation_frame,
                self._state.building,
                enabled,
                frame_count,
            )
        except ConfigError as exc:
            if self._bad_frame_count != frame_count:
                logger.warning("Animation disabled: %s", exc)
                self._bad_frame_count = frame_count
            frame = 0

        if frame != self._state.animation_frame:
            self._state = self._state.model_copy(update={"animation_frame": frame})
        return self._state
