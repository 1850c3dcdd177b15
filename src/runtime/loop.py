"""Runtime wiring of tracker, UI server, and tick scheduler for the process lifetime."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from app_config import AppConfig
from pomodoro import Activity, PomodoroTracker
from pomodoro.stats import build_stats_document
from server import Event, UIServer, UIServerConfig

from .commands import CommandDispatcher
from .controls import PomodoroControls
from .ticks import TickDependencies, TickProcessor, TickScheduler
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    ui_server_config: Optional[UIServerConfig]
    now_fn: Optional[Callable[[], datetime]] = None


class RuntimeEngine:
    """Owns the single tracker and serves it to every connected client."""

    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        settings = bootstrap.app_config.tracker

        self._tracker = PomodoroTracker(
            preferred_duration_seconds=settings.preferred_duration_minutes * 60,
            activities=[
                Activity(id=activity.id, name=activity.name)
                for activity in bootstrap.app_config.activities
            ],
            default_activity_id=settings.default_activity,
            flow_mode=settings.flow_mode,
            auto_break=settings.auto_break,
            daily_goal=settings.daily_goal,
            seconds_per_tick=settings.seconds_per_tick,
            now_fn=bootstrap.now_fn,
            logger=logging.getLogger("pomodoro"),
        )
        self._ui = RuntimeUIPublisher(now_fn=bootstrap.now_fn)
        self._controls = PomodoroControls(
            self._tracker,
            self._ui,
            logger=logging.getLogger("controls"),
        )
        self._commands = CommandDispatcher(
            self._controls,
            logger=logging.getLogger("commands"),
        )

        self._ui_server: Optional[UIServer] = None
        config = bootstrap.ui_server_config
        if config is not None and config.enabled:
            self._ui_server = UIServer(
                config=config,
                backend=self,
                logger=logging.getLogger("ui_server"),
            )
        self._ui.attach(self._ui_server)

        self._scheduler = TickScheduler(
            self._tracker,
            TickProcessor(TickDependencies(logger=logging.getLogger("ticks"), ui=self._ui)),
            tick_interval_seconds=settings.tick_interval_seconds,
            ping_interval_seconds=settings.ping_interval_seconds,
            logger=logging.getLogger("ticks"),
        )

    @property
    def tracker(self) -> PomodoroTracker:
        return self._tracker

    @property
    def controls(self) -> PomodoroControls:
        return self._controls

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    @property
    def ui_server(self) -> Optional[UIServer]:
        return self._ui_server

    def snapshot_events(self) -> list[Event]:
        return self._ui.snapshot_events(self._tracker.snapshot())

    def handle_message(self, message: str) -> Optional[Event]:
        return self._commands.handle_message(message)

    def stats_document(self) -> dict[str, Any]:
        now_fn = self._bootstrap.now_fn
        return build_stats_document(
            self._tracker.tracked_sessions(),
            daily_goal=self._tracker.daily_goal,
            now=now_fn() if now_fn is not None else datetime.now(timezone.utc),
        )

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self._ui_server is not None:
            self._logger.info("Starting UI server...")
            self._ui_server.start(timeout_seconds=timeout_seconds)
            self._logger.info(
                "UI server ready at http://%s:%d",
                self._ui_server.host,
                self._ui_server.port,
            )
        else:
            self._logger.warning("UI server disabled; tracking without live clients.")
        self._scheduler.start()
        self._logger.info(
            "Tick scheduler started (%s s of session time per tick)",
            self._tracker.seconds_per_tick,
        )

    def stop(self) -> None:
        self._scheduler.stop()
        if self._ui_server is not None:
            self._ui_server.stop()
