"""Unit tests for config management commands (show, get, set, reset, path)."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from pomobar.commands.config import app

runner = CliRunner()


@pytest.fixture()
def svc(tmp_config):
    with patch("pomobar.commands.config.get_config_service", return_value=tmp_config):
        yield tmp_config


class TestHelpFlags:
    @pytest.mark.parametrize("args", [["--help"], ["show", "--help"], ["set", "--help"]])
    def test_help(self, args):
        assert runner.invoke(app, args).exit_code == 0


class TestShow:
    def test_show_json(self, svc):
        result = runner.invoke(app, ["show", "-o", "json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["timer"]["work_minutes"] == 25

    def test_show_table(self, svc):
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 0
        assert "Timer" in result.output


class TestGetSet:
    def test_get(self, svc):
        result = runner.invoke(app, ["get", "timer.work_minutes"])
        assert result.exit_code == 0
        assert result.output.strip() == "25"

    def test_get_unknown(self, svc):
        result = runner.invoke(app, ["get", "timer.lunch"])
        assert result.exit_code == 2
        assert "not found" in result.output

    def test_set(self, svc):
        result = runner.invoke(app, ["set", "timer.work_minutes", "50"])
        assert result.exit_code == 0
        assert svc.config.timer.work_minutes == 50
        assert json.loads(svc.config_path.read_text())["timer"]["work_minutes"] == 50

    def test_set_invalid(self, svc):
        result = runner.invoke(app, ["set", "timer.work_minutes", "soon"])
        assert result.exit_code == 2
        assert svc.config.timer.work_minutes == 25


class TestReset:
    def test_reset_all_with_yes(self, svc):
        svc.set_value("timer.work_minutes", "50")
        result = runner.invoke(app, ["reset", "--yes"])
        assert result.exit_code == 0
        assert svc.config.timer.work_minutes == 25

    def test_reset_key(self, svc):
        svc.set_value("alerts.sounds", "false")
        result = runner.invoke(app, ["reset", "alerts.sounds", "-y"])
        assert result.exit_code == 0
        assert svc.config.alerts.sounds is True

    def test_reset_cancelled(self, svc):
        svc.set_value("timer.work_minutes", "50")
        result = runner.invoke(app, ["reset"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert svc.config.timer.work_minutes == 50


def test_path(svc):
    result = runner.invoke(app, ["path", "-o", "json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["state_file"] == str(svc.state_file)
    assert data["command_inbox"] == str(svc.inbox_dir)
