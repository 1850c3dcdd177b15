"""Dispatcher that turns websocket command messages into control operations."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from contracts.command_contract import (
    COMMAND_SET_ACTIVITY,
    COMMAND_SET_DURATION,
    REASON_MALFORMED_MESSAGE,
    REASON_UNKNOWN_COMMAND,
    SIMPLE_COMMAND_METHODS,
)
from contracts.ui_protocol import EVENT_COMMAND_RESULT
from pomodoro import TrackerActionResult
from pomodoro.constants import REASON_INVALID_DURATION, REASON_UNKNOWN_ACTIVITY
from server.events import Event, make_event

from .controls import PomodoroControls


def parse_int(value: Any) -> Optional[int]:
    """Best-effort integer parsing; ``None`` when the value is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_command(message: str) -> tuple[Optional[str], dict[str, Any]]:
    """Accept a bare command name or ``{"command": ..., "arguments": {...}}``."""
    text = message.strip()
    if not text:
        return None, {}
    if not text.startswith("{"):
        return text.lower(), {}

    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        return None, {}
    if not isinstance(raw, dict):
        return None, {}

    name = raw.get("command")
    arguments = raw.get("arguments")
    if not isinstance(name, str) or not name.strip():
        return None, {}
    return name.strip().lower(), arguments if isinstance(arguments, dict) else {}


class CommandDispatcher:
    """Routes parsed commands to the controls and builds the reply for the sender."""

    def __init__(
        self,
        controls: PomodoroControls,
        logger: Optional[logging.Logger] = None,
    ):
        self._controls = controls
        self._logger = logger or logging.getLogger("commands")
        self._simple_commands: dict[str, Callable[[], TrackerActionResult]] = {
            name: getattr(controls, method)
            for name, method in SIMPLE_COMMAND_METHODS.items()
        }

    def handle_message(self, message: str) -> Event:
        name, arguments = parse_command(message)
        if name is None:
            self._logger.warning("Malformed command message: %.80r", message)
            return self._reply("", False, REASON_MALFORMED_MESSAGE)

        handler = self._simple_commands.get(name)
        if handler is not None:
            result = handler()
            return self._reply(name, result.accepted, result.reason)

        if name == COMMAND_SET_DURATION:
            minutes = parse_int(arguments.get("duration", arguments.get("minutes")))
            if minutes is None:
                self._logger.warning("Ignoring unparsable duration: %r", arguments)
                return self._reply(name, False, REASON_INVALID_DURATION)
            result = self._controls.set_preferred_duration(minutes)
            return self._reply(name, result.accepted, result.reason)

        if name == COMMAND_SET_ACTIVITY:
            activity_id = parse_int(arguments.get("activity", arguments.get("id")))
            if activity_id is None:
                # Same outcome as an unknown id: selection stays as it was.
                return self._reply(name, True, REASON_UNKNOWN_ACTIVITY)
            result = self._controls.set_activity(activity_id)
            return self._reply(name, result.accepted, result.reason)

        self._logger.warning("Unsupported command: %s", name)
        return self._reply(name, False, REASON_UNKNOWN_COMMAND)

    @staticmethod
    def _reply(command: str, accepted: bool, reason: str) -> Event:
        return make_event(
            EVENT_COMMAND_RESULT,
            command=command,
            accepted=accepted,
            reason=reason,
        )
