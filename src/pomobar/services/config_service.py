"""Configuration service for Pomobar.

Single source of truth for configuration and the per-user paths derived
from it: ``config.json``, the exported state file, the command inbox and
the daily session counter.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError

from pomobar.exceptions import ConfigError
from pomobar.models.config_models import AppConfig
from pomobar.utils.files import atomic_write_text

_APP_NAME = "pomobar"


class ConfigService:
    """Service for loading, saving and querying the application's configuration."""

    def __init__(self):
        """Initialize the config service."""
        self.config_dir = Path(user_config_dir(_APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir(_APP_NAME))

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def state_file(self) -> Path:
        """Exported state file read by status bars."""
        override = self.config.export.state_file
        if override:
            return Path(override).expanduser()
        return self.config_dir / "state.json"

    @property
    def inbox_dir(self) -> Path:
        """Directory where CLI invocations drop command tokens."""
        override = self.config.commands.inbox_dir
        if override:
            return Path(override).expanduser()
        return self.config_dir / "commands"

    @property
    def sessions_file(self) -> Path:
        return self.data_dir / "sessions.json"

    def load_config(self) -> AppConfig:
        """Load configuration from storage, creating defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            raw = self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self._config = AppConfig()
            self.save_config()
            return self._config
        except OSError as e:
            raise ConfigError(f"Failed to read config: {e}") from e

        try:
            self._config = AppConfig.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {self.config_path}: {e}") from e
        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        if self._config is None:
            raise ConfigError("No configuration to save")
        try:
            atomic_write_text(self.config_path, self._config.model_dump_json(indent=4))
        except OSError as e:
            raise ConfigError(f"Failed to save config: {e}") from e

    def reset_config(self, key: str | None = None) -> None:
        """Reset the whole configuration, or one dotted key, to defaults."""
        if key is None:
            self._config = AppConfig()
        else:
            self.set_value(key, _lookup(AppConfig().model_dump(), key))
            return
        self.save_config()

    def get_value(self, key: str) -> Any:
        """Get a value by dotted key, e.g. ``timer.work_minutes``."""
        return _lookup(self.config.model_dump(), key)

    def set_value(self, key: str, value: Any) -> AppConfig:
        """Set a value by dotted key; the result is validated as a whole."""
        data = self.config.model_dump()
        parts = key.split(".")
        node = data
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                raise ConfigError(f"Configuration key '{key}' not found")
            node = node[part]
        if parts[-1] not in node:
            raise ConfigError(f"Configuration key '{key}' not found")

        if isinstance(value, str) and value.lower() in ("none", "null", ""):
            value = None
        node[parts[-1]] = value

        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for '{key}': {e}") from e
        self.save_config()
        return self._config


def _lookup(data: dict, key: str) -> Any:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            raise ConfigError(f"Configuration key '{key}' not found")
        node = node[part]
    return node


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
