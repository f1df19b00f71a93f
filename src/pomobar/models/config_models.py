"""Configuration models for Pomobar.

Persisted as ``config.json`` in the per-user config directory.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .phase import PhaseDurations


class TimerConfig(BaseModel):
    """Phase lengths and tick cadence."""

    work_minutes: int = Field(default=25, gt=0)
    short_break_minutes: int = Field(default=5, gt=0)
    long_break_minutes: int = Field(default=15, gt=0)
    sessions_before_long_break: int = Field(default=4, gt=0)
    tick_interval_seconds: float = Field(default=1.0, gt=0)

    def durations(self) -> PhaseDurations:
        return PhaseDurations.from_minutes(
            work=self.work_minutes,
            short_break=self.short_break_minutes,
            long_break=self.long_break_minutes,
            sessions_before_long_break=self.sessions_before_long_break,
        )


class ExportConfig(BaseModel):
    """Exported state file settings."""

    state_file: str | None = Field(
        default=None, description="Override for the exported state path"
    )
    staleness_window_seconds: float = Field(default=10.0, gt=0)
    tick_write_interval_seconds: float = Field(
        default=0.0, ge=0, description="Minimum spacing of tick-only writes (0 = every tick)"
    )


class CommandConfig(BaseModel):
    """Command intake settings."""

    inbox_dir: str | None = Field(default=None, description="Override for the inbox path")
    poll_interval_seconds: float = Field(default=0.25, gt=0)
    url_scheme: str = Field(default="pomobar")

    @field_validator("url_scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        v = v.strip().lower().rstrip(":/")
        if not v:
            raise ValueError("url_scheme cannot be empty")
        return v


class AlertConfig(BaseModel):
    """Notifications, sounds and sleep prevention."""

    notifications: bool = Field(default=True)
    sounds: bool = Field(default=True)
    tick_warning_seconds: int = Field(default=10, ge=0)
    prevent_sleep: bool = Field(default=True)


class AppConfig(BaseModel):
    """Main Pomobar configuration"""

    timer: TimerConfig = Field(default_factory=TimerConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    commands: CommandConfig = Field(default_factory=CommandConfig)
    alerts: AlertConfig = Field(default_factory=AlertConfig)
