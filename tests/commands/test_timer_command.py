"""Unit tests for the timer commands (run, control commands, send, open, status)."""

from __future__ import annotations

import json
import os
import time
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from pomobar.exceptions import DaemonAlreadyRunning
from pomobar.main import app
from pomobar.models.exported_state import ExportedState
from pomobar.services.command_channel import CommandInbox
from pomobar.services.runtime import AppPaths

runner = CliRunner()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def svc(tmp_config):
    with patch("pomobar.commands.timer.get_config_service", return_value=tmp_config):
        yield tmp_config


def _publish(svc, *, age=0.0, pid=None, **overrides):
    """Write an exported state as if a timer process were running."""
    values = dict(
        process_id=pid if pid is not None else os.getpid(),
        phase="Work Session",
        time_remaining_seconds=754,
        progress_percent=49.7,
        total_duration_seconds=1500,
        session_count=1,
        is_running=True,
        updated_at_epoch_seconds=time.time() - age,
    )
    values.update(overrides)
    svc.state_file.parent.mkdir(parents=True, exist_ok=True)
    svc.state_file.write_text(ExportedState(**values).to_json())


def _posted(svc) -> list[str]:
    return [p.read_text() for p in CommandInbox(svc.inbox_dir).pending()]


# ---------------------------------------------------------------------------
# Control commands
# ---------------------------------------------------------------------------


class TestControlCommands:
    @pytest.mark.parametrize("name", ["toggle", "start", "pause", "reset", "skip", "raise"])
    def test_posts_token_to_live_timer(self, svc, name):
        _publish(svc)
        result = runner.invoke(app, [name])

        assert result.exit_code == 0, result.output
        assert _posted(svc) == [name]
        assert f"Sent '{name}'" in result.output

    def test_not_running(self, svc):
        result = runner.invoke(app, ["toggle"])

        assert result.exit_code == 5
        assert "not running" in result.output
        assert _posted(svc) == []

    def test_dead_owner_is_not_running(self, svc):
        _publish(svc, pid=999_999_999)
        result = runner.invoke(app, ["skip"])
        assert result.exit_code == 5
        assert _posted(svc) == []

    def test_stale_but_alive_owner_still_receives(self, svc):
        """A busy timer process that missed its heartbeat still gets commands."""
        _publish(svc, age=60)
        result = runner.invoke(app, ["pause"])
        assert result.exit_code == 0
        assert _posted(svc) == ["pause"]


class TestSendAndOpen:
    def test_send_alias(self, svc):
        _publish(svc)
        result = runner.invoke(app, ["send", "skip-phase"])
        assert result.exit_code == 0
        assert _posted(svc) == ["skip"]

    def test_send_unknown_token(self, svc):
        _publish(svc)
        result = runner.invoke(app, ["send", "explode"])
        assert result.exit_code == 2
        assert "Unknown command" in result.output
        assert _posted(svc) == []

    def test_open_url(self, svc):
        _publish(svc)
        result = runner.invoke(app, ["open", "pomobar://show-app"])
        assert result.exit_code == 0
        assert _posted(svc) == ["raise"]

    def test_open_wrong_scheme(self, svc):
        _publish(svc)
        result = runner.invoke(app, ["open", "https://toggle"])
        assert result.exit_code == 2
        assert _posted(svc) == []


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class TestStatus:
    def test_label_when_live(self, svc):
        _publish(svc)
        result = runner.invoke(app, ["status", "--output", "label"])
        assert result.exit_code == 0
        assert result.output == "🍅 12:34\n"

    def test_label_when_disconnected(self, svc):
        result = runner.invoke(app, ["status", "-o", "label"])
        assert result.exit_code == 5
        assert result.output == "-- --:--\n"

    def test_label_when_stale(self, svc):
        _publish(svc, age=15)
        result = runner.invoke(app, ["status", "-o", "label"])
        assert result.exit_code == 5
        assert result.output == "-- --:--\n"

    def test_window_option(self, svc):
        _publish(svc, age=15)
        result = runner.invoke(app, ["status", "-o", "label", "--window", "30"])
        assert result.exit_code == 0

    def test_json(self, svc):
        _publish(svc, session_count=5, phase="Short Break", time_remaining_seconds=61)
        result = runner.invoke(app, ["status", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "live"
        assert data["phase"] == "Short Break"
        assert data["time_remaining"] == "01:01"
        assert data["session"] == "2/4"
        assert data["process_id"] == os.getpid()

    def test_yaml_disconnected(self, svc):
        result = runner.invoke(app, ["status", "-o", "yaml"])
        assert result.exit_code == 5
        assert yaml.safe_load(result.output) == {
            "status": "disconnected",
            "reason": "state file missing",
        }

    def test_pretty(self, svc):
        _publish(svc)
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Work Session" in result.output
        assert "12:34" in result.output
        assert "Session 2/4" in result.output

    def test_pretty_disconnected(self, svc):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 5
        assert "disconnected" in result.output

    def test_long_pause_reads_as_stale(self, svc):
        """A paused timer stops writing, so it ages out like any other record."""
        _publish(svc, age=60, is_running=False)
        result = runner.invoke(app, ["status", "-o", "json"])
        assert result.exit_code == 5
        data = json.loads(result.output)
        assert data["status"] == "stale"
        assert data["is_running"] is False

        result = runner.invoke(app, ["status", "-o", "json", "--window", "120"])
        assert result.exit_code == 0

    def test_help_explains_paused_timers(self, svc):
        result = runner.invoke(app, ["status", "--help"])
        assert result.exit_code == 0
        assert "stale" in result.output


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRun:
    def test_run_starts_daemon_with_resolved_paths(self, svc):
        with patch("pomobar.commands.timer.run_daemon") as run_daemon:
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 0, result.output
        config, paths = run_daemon.call_args.args
        assert config == svc.config
        assert paths == AppPaths.from_config_service(svc)

    def test_verbose_enables_console_logging(self, svc):
        with patch("pomobar.commands.timer.run_daemon"), patch(
            "pomobar.commands.timer.enable_console_logging"
        ) as enable:
            result = runner.invoke(app, ["run", "--verbose"])
        assert result.exit_code == 0
        enable.assert_called_once()

    def test_already_running(self, svc):
        with patch(
            "pomobar.commands.timer.run_daemon", side_effect=DaemonAlreadyRunning(1234)
        ):
            result = runner.invoke(app, ["run"])
        assert result.exit_code == 7
        assert "already running" in result.output
