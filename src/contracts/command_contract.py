"""Websocket command names accepted from UI clients."""

from __future__ import annotations

COMMAND_START_PAUSE = "start_pause"
COMMAND_RESET = "reset"
COMMAND_SKIP_BREAK = "skip_break"
COMMAND_SAVE = "save"
COMMAND_START_BREAK = "start_break"
COMMAND_TOGGLE_FLOW = "toggle_flow"
COMMAND_TOGGLE_AUTO_BREAK = "toggle_auto_break"
COMMAND_SET_DURATION = "set_duration"
COMMAND_SET_ACTIVITY = "set_activity"

# Commands taking no arguments, mapped to the controls method they invoke.
SIMPLE_COMMAND_METHODS: dict[str, str] = {
    COMMAND_START_PAUSE: "start_pause_resume",
    COMMAND_RESET: "reset",
    COMMAND_SKIP_BREAK: "reset",
    COMMAND_SAVE: "save",
    COMMAND_START_BREAK: "start_break",
    COMMAND_TOGGLE_FLOW: "toggle_flow_mode",
    COMMAND_TOGGLE_AUTO_BREAK: "toggle_auto_break",
}

REASON_MALFORMED_MESSAGE = "malformed_message"
REASON_UNKNOWN_COMMAND = "unknown_command"
