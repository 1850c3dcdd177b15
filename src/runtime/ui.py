from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional, Protocol

from contracts.ui_protocol import (
    EVENT_PING,
    PING_MESSAGE,
    SNAPSHOT_EVENT_ORDER,
    TOPIC_REGIONS,
)
from pomodoro import TrackerSnapshot
from server.events import Event, make_event

from .views import render_region


class EventSinkLike(Protocol):
    def publish_event(self, event: Event) -> None:
        ...


class RuntimeUIPublisher:
    """Renders topics eagerly and hands the finished events to the UI server."""

    def __init__(
        self,
        ui_server: Optional[EventSinkLike] = None,
        *,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self._ui_server = ui_server
        self._now_fn = now_fn

    def attach(self, ui_server: Optional[EventSinkLike]) -> None:
        self._ui_server = ui_server

    def publish_event(self, event: Event) -> None:
        if self._ui_server:
            self._ui_server.publish_event(event)

    def render_event(self, topic: str, snapshot: TrackerSnapshot) -> Event:
        region = TOPIC_REGIONS[topic]
        return make_event(
            topic,
            now_fn=self._now_fn,
            region=region,
            view=render_region(region, snapshot),
        )

    def publish_topics(self, topics: Iterable[str], snapshot: TrackerSnapshot) -> None:
        # Render everything first so a slow sink never sees a half-built batch.
        events = [self.render_event(topic, snapshot) for topic in topics]
        for event in events:
            self.publish_event(event)

    def snapshot_events(self, snapshot: TrackerSnapshot) -> list[Event]:
        return [self.render_event(topic, snapshot) for topic in SNAPSHOT_EVENT_ORDER]

    def publish_ping(self) -> None:
        self.publish_event(make_event(EVENT_PING, now_fn=self._now_fn, message=PING_MESSAGE))
