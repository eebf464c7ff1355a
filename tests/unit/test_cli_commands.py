"""Unit tests for the CLI: Typer command registration and basic behavior.

Exercises help output, ``version``, the ``status`` exit codes and option
merging via typer.testing.CliRunner.  The fetcher is replaced, so no
server is contacted.
"""

from __future__ import annotations

import importlib
from unittest.mock import MagicMock

import pytest
import requests
from typer.testing import CliRunner

from bambootray import __version__
from bambootray.cli.app import app
from bambootray.cli.commands._settings import resolve_settings
from bambootray.config import BambooServer, TraySettings
from bambootray.errors import FetchError

runner = CliRunner()

settings_module = importlib.import_module("bambootray.cli.commands._settings")
status_module = importlib.import_module("bambootray.cli.commands.status_cmd")


@pytest.fixture(autouse=True)
def _no_configured_servers(monkeypatch):
    """Commands fall back to clean settings, whatever the local environment holds."""
    monkeypatch.delenv("BAMBOOTRAY_SERVERS", raising=False)
    monkeypatch.setattr(settings_module, "default_settings", TraySettings(_env_file=None))


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "watch" in result.output
        assert "status" in result.output
        assert "version" in result.output

    @pytest.mark.parametrize("command", ["watch", "status"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0
        assert "--server" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# ---------------------------------------------------------------------------
# Test: status command
# ---------------------------------------------------------------------------


class TestStatusCommand:
    def test_no_server_exits_1(self):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "No Bamboo server configured" in result.output

    def test_healthy_exits_0(self, monkeypatch, make_snapshot):
        snap = make_snapshot(("CORE-NIGHTLY", False, False))
        monkeypatch.setattr(status_module, "fetcher_from_settings", lambda settings: lambda: snap)

        result = runner.invoke(app, ["status", "--server", "https://ci.example.com"])

        assert result.exit_code == 0
        assert "NIGHTLY" in result.output

    def test_broken_exits_2(self, monkeypatch, make_snapshot):
        snap = make_snapshot(("CORE-NIGHTLY", False, True))
        monkeypatch.setattr(status_module, "fetcher_from_settings", lambda settings: lambda: snap)

        result = runner.invoke(app, ["status", "--server", "https://ci.example.com"])

        assert result.exit_code == 2

    def test_unreachable_exits_1(self, monkeypatch):
        def fetch():
            raise FetchError("connection refused")

        monkeypatch.setattr(status_module, "fetcher_from_settings", lambda settings: fetch)

        result = runner.invoke(app, ["status", "--server", "https://ci.example.com"])

        assert result.exit_code == 1
        assert "connection refused" in result.output

    @pytest.mark.parametrize(
        "body",
        [
            {"plans": {"plan": None}},
            {"plans": {"plan": ["CORE-NIGHTLY"]}},
            {"plans": {"plan": [{"key": 7}]}},
        ],
    )
    def test_malformed_server_response_exits_1(self, monkeypatch, body):
        resp = MagicMock(spec=requests.Response)
        resp.status_code = 200
        resp.json.return_value = body
        monkeypatch.setattr(requests.Session, "get", MagicMock(return_value=resp))

        result = runner.invoke(app, ["status", "--server", "https://ci.example.com"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Server connection error" in result.output

    def test_options_reach_fetcher(self, monkeypatch, make_snapshot):
        seen = {}

        def factory(settings):
            seen["servers"] = settings.servers
            return lambda: make_snapshot()

        monkeypatch.setattr(status_module, "fetcher_from_settings", factory)

        runner.invoke(
            app,
            ["status", "-s", "https://ci.example.com", "-u", "bot", "-p", "A-B", "-p", "C-D"],
        )

        (server,) = seen["servers"]
        assert server.url == "https://ci.example.com"
        assert server.username == "bot"
        assert server.plan_keys == ["A-B", "C-D"]


class TestWatchCommand:
    def test_no_server_exits_1(self):
        result = runner.invoke(app, ["watch"])
        assert result.exit_code == 1
        assert "No Bamboo server configured" in result.output


# ---------------------------------------------------------------------------
# Test: option merging
# ---------------------------------------------------------------------------


class TestResolveSettings:
    def test_no_overrides_returns_base(self, settings):
        assert resolve_settings(base=settings) is settings

    def test_server_replaces_configured_list(self, settings):
        base = settings.model_copy(update={"servers": [BambooServer(name="old", url="https://old")]})
        resolved = resolve_settings("https://new", "bot", "pw", ["A-B"], base=base)

        (server,) = resolved.servers
        assert server.url == "https://new"
        assert server.password == "pw"
        assert server.plan_keys == ["A-B"]

    def test_plan_filter_applies_to_configured_servers(self, settings):
        base = settings.model_copy(
            update={"servers": [BambooServer(name="a", url="https://a"), BambooServer(name="b", url="https://b")]}
        )
        resolved = resolve_settings(plan_keys=["X-Y"], base=base)
        assert [s.plan_keys for s in resolved.servers] == [["X-Y"], ["X-Y"]]

    def test_interval_in_seconds(self, settings):
        assert resolve_settings(interval=2.5, base=settings).poll_interval_ms == 2500

    def test_speak_flag(self, settings):
        assert resolve_settings(speak=False, base=settings).spoken_notifications_enabled is False
        assert resolve_settings(speak=True, base=settings).spoken_notifications_enabled is True

    def test_base_not_mutated(self, settings):
        resolve_settings(interval=1, base=settings)
        assert settings.poll_interval_ms == 3_600_000
