"""Websocket event topics and UI region constants."""

from __future__ import annotations

# UI regions re-rendered on state changes
REGION_CONTROLS = "controls"
REGION_TIMER = "timer"
REGION_TRACKED = "tracked"
REGION_ACTIVITIES = "activities"
REGION_MODE = "mode"

# Region sync topics
EVENT_SYNC_CONTROLS = "sync_controls"
EVENT_SYNC_TIMER = "sync_timer"
EVENT_SYNC_TRACKED = "sync_tracked"
EVENT_SYNC_ACTIVITIES = "sync_activities"
EVENT_SYNC_MODE = "sync_mode"

# Session lifecycle topics, rendered with the controls region
EVENT_SESSION_STARTED = "session_started"
EVENT_SESSION_PAUSED = "session_paused"
EVENT_SESSION_RESUMED = "session_resumed"
EVENT_SESSION_RESET = "session_reset"
EVENT_SESSION_SAVED = "session_saved"

EVENT_PING = "ping"
EVENT_COMMAND_RESULT = "command_result"

PING_MESSAGE = "keepalive"

TOPIC_REGIONS: dict[str, str] = {
    EVENT_SYNC_CONTROLS: REGION_CONTROLS,
    EVENT_SYNC_TIMER: REGION_TIMER,
    EVENT_SYNC_TRACKED: REGION_TRACKED,
    EVENT_SYNC_ACTIVITIES: REGION_ACTIVITIES,
    EVENT_SYNC_MODE: REGION_MODE,
    EVENT_SESSION_STARTED: REGION_CONTROLS,
    EVENT_SESSION_PAUSED: REGION_CONTROLS,
    EVENT_SESSION_RESUMED: REGION_CONTROLS,
    EVENT_SESSION_RESET: REGION_CONTROLS,
    EVENT_SESSION_SAVED: REGION_CONTROLS,
}

# Full snapshot replayed to every new connection, one event per region.
SNAPSHOT_EVENT_ORDER: tuple[str, ...] = (
    EVENT_SYNC_CONTROLS,
    EVENT_SYNC_TIMER,
    EVENT_SYNC_TRACKED,
    EVENT_SYNC_ACTIVITIES,
    EVENT_SYNC_MODE,
)
