"""Domain models for Pomobar."""

from .exported_state import ExportedState
from .phase import Phase, PhaseDurations, PhaseState
from .sessions import CounterStore, SessionTracker

__all__ = [
    "CounterStore",
    "ExportedState",
    "Phase",
    "PhaseDurations",
    "PhaseState",
    "SessionTracker",
]
