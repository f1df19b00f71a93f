"""Wire format of the exported timer state.

This record is the only contract between the timer process and external
readers. It is rewritten in full on every change; field names on disk are
camelCase.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExportedState(BaseModel):
    """Latest observable state of the timer process."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    process_id: int = Field(..., description="PID of the writing timer process")
    phase: str = Field(..., description="Phase label, e.g. 'Work Session'")
    time_remaining_seconds: int = Field(..., ge=0)
    progress_percent: float = Field(..., ge=0.0, le=100.0)
    total_duration_seconds: int = Field(..., gt=0)
    session_count: int = Field(..., ge=0, description="Work sessions completed today")
    is_running: bool
    updated_at_epoch_seconds: float

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ExportedState":
        """Parse and validate a record; raises ``pydantic.ValidationError``."""
        return cls.model_validate_json(raw)

    def age(self, now: float) -> float:
        """Seconds elapsed since the record was written."""
        return now - self.updated_at_epoch_seconds
