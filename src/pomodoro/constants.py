"""State, action, reason, and duration constants used by the session tracker."""

from __future__ import annotations

DEFAULT_PREFERRED_DURATION_SECONDS = 25 * 60
SHORT_BREAK_SECONDS = 5 * 60
LONG_BREAK_SECONDS = 15 * 60
WORK_UNIT_SECONDS = 25 * 60
LONG_BREAK_EVERY_UNITS = 4
FLOW_BREAK_DIVISOR = 5
DEFAULT_DAILY_GOAL = 8
DEFAULT_SECONDS_PER_TICK = 1

BREAK_ACTIVITY_ID = 0
BREAK_ACTIVITY_NAME = "Break"

PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_PAUSED = "paused"

ACTION_START_PAUSE_RESUME = "start_pause_resume"
ACTION_SAVE = "save"
ACTION_RESET = "reset"
ACTION_START_BREAK = "start_break"
ACTION_TOGGLE_FLOW_MODE = "toggle_flow_mode"
ACTION_TOGGLE_AUTO_BREAK = "toggle_auto_break"
ACTION_SET_PREFERRED_DURATION = "set_preferred_duration"
ACTION_SET_ACTIVITY = "set_activity"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_SAVED = "saved"
REASON_RESET = "reset"
REASON_BREAK_STARTED = "break_started"
REASON_TOGGLED = "toggled"
REASON_UPDATED = "updated"
REASON_NO_SESSION = "no_session"
REASON_BREAK_ACTIVE = "break_active"
REASON_INVALID_DURATION = "invalid_duration"
REASON_UNKNOWN_ACTIVITY = "unknown_activity"

TRANSITION_NONE = "none"
TRANSITION_AUTO_BREAK = "auto_break"
TRANSITION_AWAITING_BREAK = "awaiting_break"
TRANSITION_BREAK_FINISHED = "break_finished"
