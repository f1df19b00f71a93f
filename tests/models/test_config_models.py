"""Unit tests for the configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pomobar.models.config_models import AppConfig, CommandConfig, TimerConfig


class TestDefaults:
    def test_default_sections(self) -> None:
        config = AppConfig()
        assert config.timer.work_minutes == 25
        assert config.export.staleness_window_seconds == 10.0
        assert config.export.state_file is None
        assert config.commands.url_scheme == "pomobar"
        assert config.alerts.tick_warning_seconds == 10

    def test_durations_in_seconds(self) -> None:
        durations = TimerConfig(work_minutes=50, sessions_before_long_break=3).durations()
        assert durations.work == 3000
        assert durations.short_break == 300
        assert durations.sessions_before_long_break == 3


class TestValidation:
    def test_zero_duration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TimerConfig(work_minutes=0)

    def test_scheme_is_normalised(self) -> None:
        assert CommandConfig(url_scheme=" PomoBar:// ").url_scheme == "pomobar"

    def test_empty_scheme_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CommandConfig(url_scheme="://")

    def test_round_trip_through_json(self) -> None:
        config = AppConfig.model_validate({"timer": {"work_minutes": 45}})
        assert AppConfig.model_validate_json(config.model_dump_json()) == config
