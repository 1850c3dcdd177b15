"""Periodic driver that advances the running session and emits keepalives."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from pomodoro import PomodoroTracker, TickOutcome
from pomodoro.constants import (
    TRANSITION_AUTO_BREAK,
    TRANSITION_AWAITING_BREAK,
    TRANSITION_BREAK_FINISHED,
)

from .ui import RuntimeUIPublisher

DEFAULT_TICK_INTERVAL_SECONDS = 1.0
DEFAULT_PING_INTERVAL_SECONDS = 10.0


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing tick outcomes."""
    logger: logging.Logger
    ui: RuntimeUIPublisher


class TickProcessor:
    """Handles tick side effects: transition logging and region broadcasts."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_tick(self, outcome: TickOutcome) -> None:
        deps = self._dependencies
        if outcome.transition == TRANSITION_AUTO_BREAK:
            deps.logger.info("Session completed, break started automatically")
        elif outcome.transition == TRANSITION_AWAITING_BREAK:
            deps.logger.debug("Session completed, waiting for a manual break")
        elif outcome.transition == TRANSITION_BREAK_FINISHED:
            deps.logger.info("Break completed, tracker idle")
        deps.ui.publish_topics(outcome.topics, outcome.snapshot)

    def handle_ping(self) -> None:
        self._dependencies.ui.publish_ping()


class TickScheduler:
    """Daemon thread firing ticks and keepalive pings at fixed cadences."""

    def __init__(
        self,
        tracker: PomodoroTracker,
        processor: TickProcessor,
        *,
        tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        ping_interval_seconds: float = DEFAULT_PING_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if tick_interval_seconds <= 0:
            raise ValueError("tick_interval_seconds must be greater than zero")
        if ping_interval_seconds <= 0:
            raise ValueError("ping_interval_seconds must be greater than zero")

        self._tracker = tracker
        self._processor = processor
        self._tick_interval = float(tick_interval_seconds)
        self._ping_interval = float(ping_interval_seconds)
        self._clock = clock
        self._logger = logger or logging.getLogger("ticks")
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            self._logger.warning("Tick scheduler is already running")
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="ticks")
        self._thread.start()

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Tick scheduler did not stop within %.1fs", timeout_seconds
            )
        self._thread = None

    def tick_once(self) -> Optional[TickOutcome]:
        outcome = self._tracker.tick()
        if outcome is not None:
            self._processor.handle_tick(outcome)
        return outcome

    def ping_once(self) -> None:
        self._processor.handle_ping()

    def _run(self) -> None:
        now = self._clock()
        next_tick = now + self._tick_interval
        next_ping = now + self._ping_interval
        while True:
            timeout = max(0.0, min(next_tick, next_ping) - self._clock())
            if self._stop.wait(timeout):
                return

            now = self._clock()
            if now >= next_tick:
                self._guarded(self.tick_once)
                next_tick = self._next_deadline(next_tick, self._tick_interval, now)
            if now >= next_ping:
                self._guarded(self.ping_once)
                next_ping = self._next_deadline(next_ping, self._ping_interval, now)

    def _guarded(self, step: Callable[[], object]) -> None:
        try:
            step()
        except Exception as error:
            # The next tick re-evaluates from the latest state.
            self._logger.error("Tick step failed: %s", error, exc_info=True)

    @staticmethod
    def _next_deadline(deadline: float, interval: float, now: float) -> float:
        # Late deadlines are skipped rather than replayed in a burst.
        deadline += interval
        if deadline <= now:
            deadline = now + interval
        return deadline
