"""Event envelope delivered to subscribers and its JSON serialization."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable


@dataclass(frozen=True)
class Event:
    """A named, already-rendered message; the payload is opaque to the hub."""
    topic: str
    payload: bytes

    def text(self) -> str:
        return self.payload.decode("utf-8")


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> Event:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    message = json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )
    return Event(topic=event_type, payload=message.encode("utf-8"))
