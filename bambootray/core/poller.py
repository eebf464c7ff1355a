"""Single-flight poller: owns the previous snapshot baseline.

At most one fetch is outstanding at any time.  A tick that fires while a
fetch is in flight is a no-op.  The fetch runs on a worker thread; its
result is applied under the shared state lock, and the in-flight flag is
cleared only after the result has been fully handled.

A failed fetch never replaces the previous snapshot, so the next success
is still diffed against the last known-good state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Protocol, Union, runtime_checkable

from bambootray.core.scheduler import PeriodicTimer
from bambootray.errors import ConfigError, FetchError
from bambootray.models.plans import BuildPlan, Snapshot

logger = logging.getLogger(__name__)

FetchResult = Union[Snapshot, Iterable[BuildPlan]]


@runtime_checkable
class PlanFetcher(Protocol):
    """Anything callable that returns the current plans.

    Implementations should raise ``FetchError`` on failure; any other
    exception is wrapped in one by the poller.
    """

    def __call__(self) -> FetchResult:
        ...


class Poller:
    """Periodic single-flight fetch driver.

    Parameters
    ----------
    fetch:
        The plan fetcher.
    lock:
        Lock serializing result handling with other state mutations.
        A private ``RLock`` is created if not provided.
    executor:
        Executor for the fetch call.  Defaults to a single-worker
        ``ThreadPoolExecutor`` created on ``start()``.
    """

    def __init__(
        self,
        fetch: PlanFetcher,
        *,
        lock: threading.RLock | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._fetch = fetch
        self._lock = lock or threading.RLock()
        self._executor = executor
        self._owns_executor = executor is None
        self._timer: PeriodicTimer | None = None
        self._on_snapshot: Callable[[Snapshot], None] | None = None
        self._on_error: Callable[[FetchError], None] | None = None
        self._previous = Snapshot()
        self._in_flight = False
        self._stopped = True

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def previous(self) -> Snapshot:
        """The last successfully applied snapshot (empty before the first)."""
        return self._previous

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def running(self) -> bool:
        return not self._stopped

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(
        self,
        interval: float,
        on_snapshot: Callable[[Snapshot], None],
        on_error: Callable[[FetchError], None],
    ) -> None:
        """Begin polling every *interval* seconds.

        An initial fetch is issued immediately.  Calling this on a running
        poller replaces its timer, so only one timer ever drives ticks.

        Raises
        ------
        ConfigError
            If *interval* is not positive.
        """
        if interval <= 0:
            raise ConfigError(f"Poll interval must be positive, got {interval}")

        timer = PeriodicTimer(interval, self.tick, name="bambootray-poll")
        with self._lock:
            old_timer, self._timer = self._timer, timer
            self._on_snapshot = on_snapshot
            self._on_error = on_error
            self._stopped = False
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="bambootray-fetch"
                )

        if old_timer is not None:
            old_timer.stop()
            logger.debug("Replaced running poll timer")
        logger.info("Poller started (interval %.1fs)", interval)
        self.tick()
        timer.start()

    def stop(self) -> None:
        """Halt future ticks.  A result arriving after this is discarded."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.stop()
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        logger.info("Poller stopped")

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """Issue a fetch unless one is already outstanding.

        Returns ``True`` if a fetch was issued.
        """
        with self._lock:
            if self._stopped:
                return False
            if self._in_flight:
                logger.debug("Fetch still in flight; skipping tick")
                return False
            self._in_flight = True
            executor = self._executor

        try:
            executor.submit(self._run_fetch)
        except RuntimeError as exc:
            # executor already shut down by a concurrent stop()
            logger.debug("Fetch not submitted: %s", exc)
            with self._lock:
                self._in_flight = False
            return False
        return True

    def _run_fetch(self) -> None:
        snapshot, error = self._fetch_snapshot()
        with self._lock:
            try:
                if self._stopped:
                    logger.debug("Poller stopped; discarding fetch result")
                    return
                if error is not None:
                    self._deliver_error(error)
                else:
                    self._deliver_snapshot(snapshot)
            finally:
                self._in_flight = False

    def _fetch_snapshot(self) -> tuple[Snapshot | None, FetchError | None]:
        try:
            result = self._fetch()
            if isinstance(result, Snapshot):
                return result, None
            return Snapshot(plans=tuple(result)), None
        except FetchError as exc:
            return None, exc
        except Exception as exc:  # noqa: BLE001
            error = FetchError(f"Unexpected fetch failure: {exc}")
            error.__cause__ = exc
            return None, error

    def _deliver_snapshot(self, snapshot: Snapshot) -> None:
        try:
            if self._on_snapshot is not None:
                self._on_snapshot(snapshot)
        except Exception:  # noqa: BLE001
            logger.exception("Snapshot handler failed; baseline not advanced")
            return
        self._previous = snapshot

    def _deliver_error(self, error: FetchError) -> None:
        logger.warning("Fetch failed: %s", error)
        try:
            if self._on_error is not None:
                self._on_error(error)
        except Exception:  # noqa: BLE001
            logger.exception("Error handler failed")
