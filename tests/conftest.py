"""Shared test fixtures for bambootray."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Executor, Future
from typing import Any

import pytest

from bambootray.config import TraySettings
from bambootray.errors import FetchError
from bambootray.models.notifications import (
    NotificationKind,
    SpokenNotification,
    VisualNotification,
)
from bambootray.models.plans import BuildPlan, Snapshot
from bambootray.routing.dispatcher import NotificationDispatcher


# ---------------------------------------------------------------------------
# Plan / snapshot factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_plan() -> Callable[..., BuildPlan]:
    """Factory fixture: build a BuildPlan with sensible defaults."""

    def _factory(
        plan_key: str = "PROJ-PLAN",
        active: bool = False,
        broken: bool = False,
        **overrides: Any,
    ) -> BuildPlan:
        defaults: dict[str, Any] = {
            "plan_key": plan_key,
            "plan_name": plan_key,
            "short_plan_name": plan_key.split("-")[-1],
            "project_name": "Project",
            "server_name": "ci",
            "build_active": active,
            "build_broken": broken,
            "build_activity": "Building" if active else "Idle",
            "build_status": "Failed" if broken else "Successful",
        }
        defaults.update(overrides)
        return BuildPlan(**defaults)

    return _factory


@pytest.fixture
def make_snapshot(make_plan: Callable[..., BuildPlan]) -> Callable[..., Snapshot]:
    """Factory fixture: build a Snapshot from ``(key, active, broken)`` tuples."""

    def _factory(*plans: tuple[str, bool, bool]) -> Snapshot:
        return Snapshot(
            plans=tuple(make_plan(key, active, broken) for key, active, broken in plans)
        )

    return _factory


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> TraySettings:
    """Settings with both channels on for every kind, isolated from the env."""
    return TraySettings(
        _env_file=None,
        visual_notifications_enabled=True,
        visual_notification_kinds=set(NotificationKind),
        spoken_notifications_enabled=True,
        spoken_notification_kinds=set(NotificationKind),
        voice_id="",
        poll_interval_ms=3_600_000,
        animation_interval_ms=3_600_000,
    )


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class RecordingVisualSink:
    """A visual sink that records everything it receives."""

    def __init__(self, name: str = "recording_visual") -> None:
        self._name = name
        self.received: list[VisualNotification] = []

    @property
    def sink_name(self) -> str:
        return self._name

    def accept(self, notification: VisualNotification) -> None:
        self.received.append(notification)


class RecordingSpokenSink:
    """A spoken sink that records everything it receives."""

    def __init__(
        self, name: str = "recording_spoken", voices: Iterable[str] | None = None
    ) -> None:
        self._name = name
        self.available_voices = set(voices) if voices is not None else None
        self.received: list[SpokenNotification] = []

    @property
    def sink_name(self) -> str:
        return self._name

    def accept(self, notification: SpokenNotification) -> None:
        self.received.append(notification)


@pytest.fixture
def visual_sink() -> RecordingVisualSink:
    return RecordingVisualSink()


@pytest.fixture
def spoken_sink() -> RecordingSpokenSink:
    return RecordingSpokenSink()


@pytest.fixture
def dispatcher(
    visual_sink: RecordingVisualSink, spoken_sink: RecordingSpokenSink
) -> NotificationDispatcher:
    """A dispatcher wired to the recording sinks."""
    d = NotificationDispatcher()
    d.register_visual_sink(visual_sink)
    d.register_spoken_sink(spoken_sink)
    return d


# ---------------------------------------------------------------------------
# Fetch helpers
# ---------------------------------------------------------------------------


class ImmediateExecutor(Executor):
    """Runs submitted callables inline, making poll cycles deterministic."""

    def submit(self, fn, /, *args, **kwargs):  # type: ignore[override]
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # noqa: BLE001
            future.set_exception(exc)
        return future


class ScriptedFetcher:
    """Returns (or raises) queued results in order; repeats the last one."""

    def __init__(self, *results: Snapshot | Exception) -> None:
        self._results = list(results)
        self.calls = 0

    def queue(self, *results: Snapshot | Exception) -> None:
        self._results.extend(results)

    def __call__(self) -> Snapshot:
        self.calls += 1
        if not self._results:
            raise FetchError("no scripted result")
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, Exception):
            raise result
        return result


class BlockingFetcher:
    """Blocks each fetch until ``release()`` is called."""

    def __init__(self, result: Snapshot | None = None) -> None:
        self.result = result or Snapshot()
        self.started = threading.Event()
        self._release = threading.Event()
        self._count_lock = threading.Lock()
        self.calls = 0

    def release(self) -> None:
        self._release.set()

    def __call__(self) -> Snapshot:
        with self._count_lock:
            self.calls += 1
        self.started.set()
        self._release.wait(timeout=5)
        return self.result


@pytest.fixture
def immediate_executor() -> ImmediateExecutor:
    return ImmediateExecutor()


@pytest.fixture
def make_fetcher() -> type[ScriptedFetcher]:
    """Factory fixture: ``make_fetcher(snapshot, FetchError(...), ...)``."""
    return ScriptedFetcher


@pytest.fixture
def blocking_fetcher() -> Iterator[BlockingFetcher]:
    fetcher = BlockingFetcher()
    yield fetcher
    fetcher.release()


@pytest.fixture
def make_spoken_sink() -> type[RecordingSpokenSink]:
    """Factory fixture: ``make_spoken_sink(name, voices=[...])``."""
    return RecordingSpokenSink


@pytest.fixture
def make_visual_sink() -> type[RecordingVisualSink]:
    return RecordingVisualSink
