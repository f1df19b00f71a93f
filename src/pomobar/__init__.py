"""Pomobar - a Pomodoro timer that publishes its state to status bars."""

__version__ = "0.3.0"
