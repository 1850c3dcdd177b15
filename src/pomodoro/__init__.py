from .activities import BREAK_ACTIVITY, DEFAULT_ACTIVITIES, Activity
from .service import (
    PomodoroTracker,
    Session,
    TickOutcome,
    TrackerActionResult,
    TrackerPhase,
    TrackerSnapshot,
    break_duration_seconds,
)

__all__ = [
    "Activity",
    "BREAK_ACTIVITY",
    "DEFAULT_ACTIVITIES",
    "PomodoroTracker",
    "Session",
    "TickOutcome",
    "TrackerActionResult",
    "TrackerPhase",
    "TrackerSnapshot",
    "break_duration_seconds",
]
