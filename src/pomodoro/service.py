"""Thread-safe in-memory session tracker: the single global pomodoro state."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Iterable, Literal, Optional

from contracts.ui_protocol import (
    EVENT_SESSION_PAUSED,
    EVENT_SESSION_RESET,
    EVENT_SESSION_RESUMED,
    EVENT_SESSION_SAVED,
    EVENT_SESSION_STARTED,
    EVENT_SYNC_ACTIVITIES,
    EVENT_SYNC_CONTROLS,
    EVENT_SYNC_MODE,
    EVENT_SYNC_TIMER,
    EVENT_SYNC_TRACKED,
)

from .activities import BREAK_ACTIVITY, DEFAULT_ACTIVITIES, Activity, build_registry
from .constants import (
    ACTION_RESET,
    ACTION_SAVE,
    ACTION_SET_ACTIVITY,
    ACTION_SET_PREFERRED_DURATION,
    ACTION_START_BREAK,
    ACTION_START_PAUSE_RESUME,
    ACTION_TOGGLE_AUTO_BREAK,
    ACTION_TOGGLE_FLOW_MODE,
    DEFAULT_DAILY_GOAL,
    DEFAULT_PREFERRED_DURATION_SECONDS,
    DEFAULT_SECONDS_PER_TICK,
    FLOW_BREAK_DIVISOR,
    LONG_BREAK_EVERY_UNITS,
    LONG_BREAK_SECONDS,
    PHASE_IDLE,
    PHASE_PAUSED,
    PHASE_RUNNING,
    REASON_BREAK_ACTIVE,
    REASON_BREAK_STARTED,
    REASON_INVALID_DURATION,
    REASON_NO_SESSION,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_SAVED,
    REASON_STARTED,
    REASON_TOGGLED,
    REASON_UNKNOWN_ACTIVITY,
    REASON_UPDATED,
    SHORT_BREAK_SECONDS,
    TRANSITION_AUTO_BREAK,
    TRANSITION_AWAITING_BREAK,
    TRANSITION_BREAK_FINISHED,
    TRANSITION_NONE,
    WORK_UNIT_SECONDS,
)

TrackerPhase = Literal["idle", "running", "paused"]


@dataclass(frozen=True)
class Session:
    """One work interval or break. Elapsed time is counted in whole seconds."""
    started_at: datetime
    planned_seconds: int
    activity: Activity
    flow_mode: bool = False
    is_break: bool = False
    elapsed_seconds: int = 0

    @property
    def completed(self) -> bool:
        # Work in flow mode is a stopwatch and never completes by itself.
        if self.flow_mode and not self.is_break:
            return False
        return self.elapsed_seconds >= self.planned_seconds

    @property
    def remaining_seconds(self) -> int:
        return self.planned_seconds - self.elapsed_seconds


@dataclass(frozen=True)
class TrackerSnapshot:
    """Immutable copy of the global timer state handed to renderers."""
    current: Optional[Session]
    running: bool
    preferred_duration_seconds: int
    flow_mode: bool
    auto_break: bool
    current_activity: Activity
    activities: tuple[Activity, ...]
    tracked: tuple[Session, ...]
    daily_goal: int

    @property
    def phase(self) -> TrackerPhase:
        if self.current is None:
            return PHASE_IDLE
        return PHASE_RUNNING if self.running else PHASE_PAUSED

    @property
    def on_break(self) -> bool:
        return self.current is not None and self.current.is_break

    @property
    def completed(self) -> bool:
        return self.current is not None and self.current.completed

    @property
    def total_tracked_seconds(self) -> int:
        return sum(session.elapsed_seconds for session in self.tracked)

    @property
    def display_seconds(self) -> int:
        """Value shown on the clock: countdown, or count-up for flow work."""
        current = self.current
        if current is None:
            return 0 if self.flow_mode else self.preferred_duration_seconds
        if current.flow_mode and not current.is_break:
            return current.elapsed_seconds
        return current.remaining_seconds


@dataclass(frozen=True)
class TrackerActionResult:
    """Result envelope returned after applying an operation.

    ``topics`` lists the events to publish, one per affected UI region; it is
    empty when the operation was rejected or changed nothing.
    """
    action: str
    accepted: bool
    reason: str
    topics: tuple[str, ...]
    snapshot: TrackerSnapshot


@dataclass(frozen=True)
class TickOutcome:
    """What a single scheduler tick did to the running session."""
    transition: str
    topics: tuple[str, ...]
    snapshot: TrackerSnapshot


def break_duration_seconds(completed: Session, total_tracked_seconds: int) -> int:
    """Pick the break length after ``completed`` has been archived.

    Flow sessions earn one minute of break per five minutes worked. Otherwise
    every fourth 25 minute unit across the whole history earns a long break.
    """
    if completed.flow_mode:
        return completed.elapsed_seconds // FLOW_BREAK_DIVISOR
    completed_units = total_tracked_seconds // WORK_UNIT_SECONDS
    if completed_units > 0 and completed_units % LONG_BREAK_EVERY_UNITS == 0:
        return LONG_BREAK_SECONDS
    return SHORT_BREAK_SECONDS


class PomodoroTracker:
    """Owns the current session, the mode toggles, and the tracked history.

    All reads and writes go through one lock; every operation returns an
    immutable snapshot captured inside that lock.
    """

    def __init__(
        self,
        *,
        preferred_duration_seconds: int = DEFAULT_PREFERRED_DURATION_SECONDS,
        activities: Iterable[Activity] = DEFAULT_ACTIVITIES,
        default_activity_id: Optional[int] = None,
        flow_mode: bool = False,
        auto_break: bool = True,
        daily_goal: int = DEFAULT_DAILY_GOAL,
        seconds_per_tick: int = DEFAULT_SECONDS_PER_TICK,
        tracked: Iterable[Session] = (),
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if preferred_duration_seconds <= 0:
            raise ValueError("preferred_duration_seconds must be greater than zero")
        if seconds_per_tick <= 0:
            raise ValueError("seconds_per_tick must be greater than zero")

        self._activities = build_registry(activities)
        if default_activity_id is None:
            default_activity_id = next(iter(self._activities))
        if default_activity_id not in self._activities:
            raise ValueError(f"unknown default activity id: {default_activity_id}")

        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))
        self._logger = logger or logging.getLogger("pomodoro")
        self._seconds_per_tick = int(seconds_per_tick)
        self._lock = threading.Lock()

        self._current: Optional[Session] = None
        self._running = False
        self._preferred_duration_seconds = int(preferred_duration_seconds)
        self._flow_mode = bool(flow_mode)
        self._auto_break = bool(auto_break)
        self._current_activity = self._activities[default_activity_id]
        self._tracked: list[Session] = list(tracked)
        self._daily_goal = int(daily_goal)

    @property
    def seconds_per_tick(self) -> int:
        return self._seconds_per_tick

    def snapshot(self) -> TrackerSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def start_pause_resume(self) -> TrackerActionResult:
        action = ACTION_START_PAUSE_RESUME
        with self._lock:
            current = self._current
            if current is not None and current.is_break:
                return self._result_locked(action, False, REASON_BREAK_ACTIVE)

            if current is None:
                self._current = Session(
                    started_at=self._now_fn(),
                    planned_seconds=self._preferred_duration_seconds,
                    activity=self._current_activity,
                    flow_mode=self._flow_mode,
                )
                self._running = True
                self._logger.info(
                    "Session started: activity=%s planned=%ss flow=%s",
                    self._current_activity.name,
                    self._preferred_duration_seconds,
                    self._flow_mode,
                )
                return self._result_locked(
                    action, True, REASON_STARTED, (EVENT_SESSION_STARTED,)
                )

            if self._running:
                self._running = False
                self._logger.info(
                    "Session paused: elapsed=%ss", current.elapsed_seconds
                )
                return self._result_locked(
                    action, True, REASON_PAUSED, (EVENT_SESSION_PAUSED,)
                )

            self._running = True
            self._logger.info("Session resumed: elapsed=%ss", current.elapsed_seconds)
            return self._result_locked(
                action, True, REASON_RESUMED, (EVENT_SESSION_RESUMED,)
            )

    def save(self) -> TrackerActionResult:
        with self._lock:
            rejection = self._work_session_rejection_locked()
            if rejection is not None:
                return self._result_locked(ACTION_SAVE, False, rejection)

            self._archive_locked()
            return self._result_locked(
                ACTION_SAVE,
                True,
                REASON_SAVED,
                (EVENT_SESSION_SAVED, EVENT_SYNC_TRACKED, EVENT_SYNC_TIMER),
            )

    def reset(self) -> TrackerActionResult:
        with self._lock:
            if self._current is not None:
                self._logger.info(
                    "Session reset: break=%s elapsed=%ss",
                    self._current.is_break,
                    self._current.elapsed_seconds,
                )
            self._current = None
            self._running = False
            return self._result_locked(
                ACTION_RESET,
                True,
                REASON_RESET,
                (EVENT_SESSION_RESET, EVENT_SYNC_TIMER),
            )

    def start_break(self) -> TrackerActionResult:
        with self._lock:
            rejection = self._work_session_rejection_locked()
            if rejection is not None:
                return self._result_locked(ACTION_START_BREAK, False, rejection)

            completed = self._archive_locked()
            self._install_break_locked(completed)
            return self._result_locked(
                ACTION_START_BREAK,
                True,
                REASON_BREAK_STARTED,
                (EVENT_SYNC_TRACKED, EVENT_SYNC_CONTROLS, EVENT_SYNC_TIMER),
            )

    def toggle_flow_mode(self) -> TrackerActionResult:
        with self._lock:
            self._flow_mode = not self._flow_mode
            current = self._current
            if current is not None and not current.is_break:
                self._current = replace(current, flow_mode=self._flow_mode)
            self._logger.info("Flow mode %s", "enabled" if self._flow_mode else "disabled")
            return self._result_locked(
                ACTION_TOGGLE_FLOW_MODE,
                True,
                REASON_TOGGLED,
                (EVENT_SYNC_TIMER, EVENT_SYNC_MODE, EVENT_SYNC_CONTROLS),
            )

    def toggle_auto_break(self) -> TrackerActionResult:
        with self._lock:
            self._auto_break = not self._auto_break
            self._logger.info("Auto break %s", "enabled" if self._auto_break else "disabled")
            return self._result_locked(
                ACTION_TOGGLE_AUTO_BREAK, True, REASON_TOGGLED, (EVENT_SYNC_MODE,)
            )

    def set_preferred_duration(self, minutes: int) -> TrackerActionResult:
        action = ACTION_SET_PREFERRED_DURATION
        with self._lock:
            if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
                self._logger.warning("Ignoring invalid preferred duration: %r", minutes)
                return self._result_locked(action, False, REASON_INVALID_DURATION)

            self._preferred_duration_seconds = minutes * 60
            current = self._current
            if current is not None and not current.is_break:
                self._current = replace(
                    current, planned_seconds=self._preferred_duration_seconds
                )
            self._logger.info("Preferred duration set to %s min", minutes)
            return self._result_locked(
                action, True, REASON_UPDATED, (EVENT_SYNC_TIMER, EVENT_SYNC_MODE)
            )

    def set_activity(self, activity_id: int) -> TrackerActionResult:
        with self._lock:
            activity = self._activities.get(activity_id)
            if activity is None:
                # Unknown ids leave the selection untouched and are not an error.
                self._logger.debug("Ignoring unknown activity id: %r", activity_id)
                return self._result_locked(ACTION_SET_ACTIVITY, True, REASON_UNKNOWN_ACTIVITY)

            self._current_activity = activity
            current = self._current
            if current is not None and not current.is_break:
                self._current = replace(current, activity=activity)
            return self._result_locked(
                ACTION_SET_ACTIVITY, True, REASON_UPDATED, (EVENT_SYNC_ACTIVITIES,)
            )

    def tick(self) -> Optional[TickOutcome]:
        """Advance the running session by one tick and apply completion rules.

        Returns ``None`` when nothing is running.
        """
        with self._lock:
            current = self._current
            if not self._running or current is None:
                return None

            current = replace(
                current,
                elapsed_seconds=current.elapsed_seconds + self._seconds_per_tick,
            )
            self._current = current

            transition = TRANSITION_NONE
            topics: list[str] = []
            if not current.is_break and current.completed:
                if self._auto_break:
                    archived = self._archive_locked()
                    self._install_break_locked(archived)
                    transition = TRANSITION_AUTO_BREAK
                    topics.extend((EVENT_SYNC_TRACKED, EVENT_SYNC_CONTROLS))
                else:
                    transition = TRANSITION_AWAITING_BREAK
                    topics.append(EVENT_SYNC_CONTROLS)
            elif current.is_break and current.completed:
                self._current = None
                self._running = False
                transition = TRANSITION_BREAK_FINISHED
                topics.append(EVENT_SESSION_RESET)
                self._logger.info("Break finished after %ss", current.elapsed_seconds)

            topics.append(EVENT_SYNC_TIMER)
            return TickOutcome(
                transition=transition,
                topics=tuple(topics),
                snapshot=self._snapshot_locked(),
            )

    def tracked_sessions(self) -> tuple[Session, ...]:
        with self._lock:
            return tuple(self._tracked)

    @property
    def daily_goal(self) -> int:
        return self._daily_goal

    def _work_session_rejection_locked(self) -> Optional[str]:
        if self._current is None:
            return REASON_NO_SESSION
        if self._current.is_break:
            return REASON_BREAK_ACTIVE
        return None

    def _archive_locked(self) -> Session:
        session = self._current
        if session is None:
            raise RuntimeError("no current session to archive")
        self._tracked.append(session)
        self._current = None
        self._running = False
        self._logger.info(
            "Session saved: activity=%s elapsed=%ss",
            session.activity.name,
            session.elapsed_seconds,
        )
        return session

    def _install_break_locked(self, completed: Session) -> None:
        total = sum(session.elapsed_seconds for session in self._tracked)
        duration = break_duration_seconds(completed, total)
        self._current = Session(
            started_at=self._now_fn(),
            planned_seconds=duration,
            activity=BREAK_ACTIVITY,
            flow_mode=False,
            is_break=True,
        )
        self._running = True
        self._logger.info("Break started: duration=%ss", duration)

    def _result_locked(
        self,
        action: str,
        accepted: bool,
        reason: str,
        topics: tuple[str, ...] = (),
    ) -> TrackerActionResult:
        return TrackerActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            topics=topics,
            snapshot=self._snapshot_locked(),
        )

    def _snapshot_locked(self) -> TrackerSnapshot:
        return TrackerSnapshot(
            current=self._current,
            running=self._running,
            preferred_duration_seconds=self._preferred_duration_seconds,
            flow_mode=self._flow_mode,
            auto_break=self._auto_break,
            current_activity=self._current_activity,
            activities=tuple(self._activities.values()),
            tracked=tuple(self._tracked),
            daily_goal=self._daily_goal,
        )
