"""UI server module for the web UI page and websocket event streaming."""

from .config import ServerConfigurationError, UIServerConfig
from .events import Event, make_event
from .hub import BroadcastHub, Subscriber
from .service import UIBackend, UIServer

__all__ = [
    "BroadcastHub",
    "Event",
    "ServerConfigurationError",
    "Subscriber",
    "UIBackend",
    "UIServerConfig",
    "UIServer",
    "make_event",
]
