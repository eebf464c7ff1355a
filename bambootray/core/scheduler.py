"""Periodic background timer used for poll and animation ticks."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from bambootray.errors import ConfigError

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Calls *callback* every *interval* seconds on a daemon thread.

    The first call happens one interval after ``start()``.  Exceptions from
    the callback are logged and do not stop the timer.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], object],
        *,
        name: str = "bambootray-timer",
    ) -> None:
        if interval <= 0:
            raise ConfigError(f"Timer interval must be positive, got {interval}")
        self.interval = interval
        self._callback = callback
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the timer thread.  Calling twice is a no-op."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=self._name,
            daemon=True,
        )
        self._thread.start()
        logger.debug("Started %s (every %.3fs)", self._name, self.interval)

    def stop(self, *, wait: bool = True, timeout: float = 5.0) -> None:
        """Signal the timer to stop and, if *wait*, join the thread.

        The join is always skipped when called from the callback itself.
        """
        self._stop_event.set()
        thread = self._thread
        if not wait or thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("%s did not exit within %.1f seconds", self._name, timeout)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self._callback()
            except Exception:  # noqa: BLE001
                logger.exception("%s callback failed", self._name)
