"""JSON-file backed store for the daily session counter."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from pomobar.exceptions import PersistenceReadFailure, PersistenceWriteFailure
from pomobar.utils.files import atomic_write_text


class JsonSessionStore:
    """Persists ``{"count": n, "date": "YYYY-MM-DD"}`` to a single file."""

    def __init__(self, path: Path):
        self.path = path

    def read_today_count(self) -> tuple[int, date | None]:
        """Return the stored count and the day it belongs to.

        A missing file is a fresh install: ``(0, None)``.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return 0, None
        except OSError as e:
            raise PersistenceReadFailure(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
            count = int(data["count"])
            day = date.fromisoformat(data["date"]) if data.get("date") else None
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise PersistenceReadFailure(f"Corrupt session file {self.path}: {e}") from e

        if count < 0:
            raise PersistenceReadFailure(f"Negative session count in {self.path}")
        return count, day

    def write_today_count(self, count: int, day: date) -> None:
        payload = json.dumps({"count": count, "date": day.isoformat()}, indent=2)
        try:
            atomic_write_text(self.path, payload)
        except OSError as e:
            raise PersistenceWriteFailure(f"Cannot write {self.path}: {e}") from e
