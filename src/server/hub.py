"""Fan-out of rendered events to every live subscriber connection."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

from .events import Event

DEFAULT_SUBSCRIBER_CAPACITY = 100


class Subscriber:
    """Bounded outbound queue owned by one connection.

    ``offer`` never blocks: it reports ``False`` when the queue is full or the
    subscriber is already closed. Use from the server's event loop thread.
    """

    def __init__(self, *, capacity: int = DEFAULT_SUBSCRIBER_CAPACITY, name: str = ""):
        if capacity <= 0:
            raise ValueError("capacity must be greater than zero")
        self._queue: asyncio.Queue[Optional[Event]] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self.name = name or f"subscriber-{id(self):x}"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def offer(self, event: Event) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    async def receive(self) -> Optional[Event]:
        """Wait for the next event; ``None`` once the subscriber is closed."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Undelivered events are dropped; the sentinel wakes a waiting receiver.
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    def __repr__(self) -> str:
        return f"Subscriber({self.name!r}, pending={self.pending}, closed={self._closed})"


class BroadcastHub:
    """Registry of subscribers; a subscriber that cannot accept an event is evicted."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("hub")
        self._subscribers: set[Subscriber] = set()
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def register(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers.add(subscriber)
            count = len(self._subscribers)
        self._logger.info("Subscriber registered: %s (total=%d)", subscriber.name, count)

    def unregister(self, subscriber: Subscriber) -> bool:
        with self._lock:
            removed = subscriber in self._subscribers
            self._subscribers.discard(subscriber)
            count = len(self._subscribers)
        subscriber.close()
        if removed:
            self._logger.info(
                "Subscriber unregistered: %s (total=%d)", subscriber.name, count
            )
        return removed

    def publish(self, event: Event) -> int:
        """Offer ``event`` to every current member and return the delivery count."""
        with self._lock:
            members = tuple(self._subscribers)

        delivered = 0
        for subscriber in members:
            if subscriber.offer(event):
                delivered += 1
                continue
            self._logger.warning(
                "Evicting subscriber %s: cannot accept %s", subscriber.name, event.topic
            )
            self.unregister(subscriber)
        return delivered

    def close_all(self) -> None:
        with self._lock:
            members = tuple(self._subscribers)
            self._subscribers.clear()
        for subscriber in members:
            subscriber.close()
