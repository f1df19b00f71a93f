"""Tests for the top-level pomobar application."""

from typer.testing import CliRunner

from pomobar import __version__
from pomobar.main import app

runner = CliRunner()


class TestMainApp:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_timer_commands_are_top_level(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("run", "toggle", "skip", "status", "config"):
            assert name in result.output

    def test_typo_suggests_command(self):
        result = runner.invoke(app, ["togle"])
        assert result.exit_code == 1
        assert "Did you mean this?" in result.output
        assert "toggle" in result.output
