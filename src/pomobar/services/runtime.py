"""Timer process: wiring of the application context and the event loop.

``AppContext`` is created once per process and passed explicitly to the
daemon; nothing in Pomobar keeps the engine in a module-level global.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from pomobar.exceptions import DaemonAlreadyRunning
from pomobar.models.config_models import AppConfig
from pomobar.models.sessions import SessionTracker

from .alerts import (
    DesktopNotifier,
    NotificationScheduler,
    NotifyingRaiseHandler,
    RaiseHandler,
    SoundPlayer,
    SystemSoundPlayer,
)
from .command_channel import CommandChannel, CommandInbox
from .config_service import ConfigService
from .engine import TimerEngine
from .scheduler import AsyncioScheduler, Scheduler
from .session_store import JsonSessionStore
from .sleep_prevention import SleepPreventer
from .state_exporter import StateExporter
from .state_reader import SourceStatus, StateReader


@dataclass
class AppPaths:
    state_file: Path
    inbox_dir: Path
    sessions_file: Path

    @classmethod
    def from_config_service(cls, config_service: ConfigService) -> "AppPaths":
        return cls(
            state_file=config_service.state_file,
            inbox_dir=config_service.inbox_dir,
            sessions_file=config_service.sessions_file,
        )


@dataclass
class AppContext:
    """Everything one timer process owns."""

    config: AppConfig
    paths: AppPaths
    engine: TimerEngine
    exporter: StateExporter
    reader: StateReader
    channel: CommandChannel
    inbox: CommandInbox
    sleep_preventer: SleepPreventer


def check_state_owner(reader: StateReader, pid: int) -> None:
    """Raise ``DaemonAlreadyRunning`` when a live process other than ``pid`` exports state."""
    result = reader.read()
    owner = result.state.process_id if result.state else None
    if result.status is not SourceStatus.DISCONNECTED and owner != pid:
        raise DaemonAlreadyRunning(owner)


def build_context(
    config: AppConfig,
    paths: AppPaths,
    *,
    scheduler: Scheduler,
    notifier: NotificationScheduler | None = None,
    sound_player: SoundPlayer | None = None,
    sleep_preventer: SleepPreventer | None = None,
    raise_handler: RaiseHandler | None = None,
    pid: int | None = None,
) -> AppContext:
    """Assemble the engine and its collaborators from configuration."""
    alerts = config.alerts
    if notifier is None:
        notifier = DesktopNotifier(enabled=alerts.notifications)
    if sound_player is None:
        sound_player = SystemSoundPlayer(enabled=alerts.sounds)
    if sleep_preventer is None:
        sleep_preventer = SleepPreventer(enabled=alerts.prevent_sleep)
    if raise_handler is None and isinstance(notifier, DesktopNotifier):
        raise_handler = NotifyingRaiseHandler(notifier)

    tracker = SessionTracker(JsonSessionStore(paths.sessions_file), clock=date.today)
    engine = TimerEngine(
        tracker=tracker,
        scheduler=scheduler,
        sleep_preventer=sleep_preventer,
        durations=config.timer.durations(),
        notifier=notifier,
        sound_player=sound_player,
        tick_interval=config.timer.tick_interval_seconds,
        tick_warning_seconds=alerts.tick_warning_seconds,
    )
    exporter = StateExporter(
        paths.state_file,
        pid=pid,
        tick_write_interval=config.export.tick_write_interval_seconds,
    )
    engine.add_listener(exporter)

    return AppContext(
        config=config,
        paths=paths,
        engine=engine,
        exporter=exporter,
        reader=StateReader(
            paths.state_file, staleness_window=config.export.staleness_window_seconds
        ),
        channel=CommandChannel(engine, raise_handler=raise_handler),
        inbox=CommandInbox(paths.inbox_dir),
        sleep_preventer=sleep_preventer,
    )


class TimerDaemon:
    """Runs the engine and drains the command inbox on one event loop."""

    def __init__(self, context: AppContext, logger: logging.Logger | None = None):
        self.context = context
        self._logger = logger or logging.getLogger("pomobar.daemon")

    def claim(self) -> None:
        """Take ownership of the state file; refuse if another process holds it."""
        check_state_owner(self.context.reader, self.context.exporter.pid)

        self.context.paths.inbox_dir.mkdir(parents=True, exist_ok=True)
        self.context.inbox.purge()
        self.context.exporter.export(self.context.engine.snapshot(), transition=True)
        self._logger.info(
            "Timer process %s ready, state file %s",
            self.context.exporter.pid,
            self.context.paths.state_file,
        )

    async def serve(self, stop: asyncio.Event) -> None:
        """Poll the inbox until ``stop`` is set, then shut down."""
        poll_interval = self.context.config.commands.poll_interval_seconds
        try:
            while not stop.is_set():
                self.context.channel.process_inbox(self.context.inbox)
                try:
                    await asyncio.wait_for(stop.wait(), timeout=poll_interval)
                except TimeoutError:
                    pass
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self.context.engine.close()
        self.context.sleep_preventer.release_all()
        self.context.exporter.clear()
        self._logger.info("Timer process %s stopped", self.context.exporter.pid)


async def _run(config: AppConfig, paths: AppPaths) -> None:
    pid = os.getpid()
    # refuse before the session tracker touches the running process's counter file
    check_state_owner(
        StateReader(paths.state_file, staleness_window=config.export.staleness_window_seconds),
        pid,
    )

    loop = asyncio.get_running_loop()
    context = build_context(config, paths, scheduler=AsyncioScheduler(loop), pid=pid)
    daemon = TimerDaemon(context)
    daemon.claim()

    stop = asyncio.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
        except (NotImplementedError, RuntimeError):
            # no signal handlers outside the main thread or on Windows
            pass
    await daemon.serve(stop)


def run_daemon(config: AppConfig, paths: AppPaths) -> None:
    """Run the timer process in the foreground until interrupted."""
    try:
        asyncio.run(_run(config, paths))
    except KeyboardInterrupt:
        pass
