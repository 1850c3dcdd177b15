"""Inbound operations exposed to request handlers."""

from __future__ import annotations

import logging
from typing import Optional

from pomodoro import PomodoroTracker, TrackerActionResult

from .ui import RuntimeUIPublisher


class PomodoroControls:
    """Applies an operation to the tracker, then broadcasts the affected regions.

    Every method returns the tracker's result envelope; ``accepted`` is what a
    transport maps to success or "bad request" (only ``save`` and
    ``start_break`` are rejected for state reasons).
    """

    def __init__(
        self,
        tracker: PomodoroTracker,
        ui: RuntimeUIPublisher,
        logger: Optional[logging.Logger] = None,
    ):
        self._tracker = tracker
        self._ui = ui
        self._logger = logger or logging.getLogger("controls")

    def start_pause_resume(self) -> TrackerActionResult:
        return self._publish(self._tracker.start_pause_resume())

    def reset(self) -> TrackerActionResult:
        return self._publish(self._tracker.reset())

    def save(self) -> TrackerActionResult:
        return self._publish(self._tracker.save())

    def start_break(self) -> TrackerActionResult:
        return self._publish(self._tracker.start_break())

    def toggle_flow_mode(self) -> TrackerActionResult:
        return self._publish(self._tracker.toggle_flow_mode())

    def toggle_auto_break(self) -> TrackerActionResult:
        return self._publish(self._tracker.toggle_auto_break())

    def set_preferred_duration(self, minutes: int) -> TrackerActionResult:
        return self._publish(self._tracker.set_preferred_duration(minutes))

    def set_activity(self, activity_id: int) -> TrackerActionResult:
        return self._publish(self._tracker.set_activity(activity_id))

    def _publish(self, result: TrackerActionResult) -> TrackerActionResult:
        if not result.accepted:
            self._logger.warning(
                "Rejected %s: %s (phase=%s)",
                result.action,
                result.reason,
                result.snapshot.phase,
            )
        if result.topics:
            self._ui.publish_topics(result.topics, result.snapshot)
        return result
