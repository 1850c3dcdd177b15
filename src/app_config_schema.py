"""Typed settings produced from config.toml."""

from __future__ import annotations

from dataclasses import dataclass, field


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class ActivitySettings:
    id: int
    name: str


DEFAULT_ACTIVITY_SETTINGS: tuple[ActivitySettings, ...] = (
    ActivitySettings(id=1, name="General"),
    ActivitySettings(id=2, name="Boot.dev"),
    ActivitySettings(id=3, name="Personal projects"),
    ActivitySettings(id=4, name="Japanese"),
)


@dataclass(frozen=True)
class TrackerSettings:
    preferred_duration_minutes: int = 25
    daily_goal: int = 8
    flow_mode: bool = False
    auto_break: bool = True
    default_activity: int = 1
    seconds_per_tick: int = 1
    tick_interval_seconds: float = 1.0
    ping_interval_seconds: float = 10.0


@dataclass(frozen=True)
class UIServerSettings:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""
    subscriber_queue_size: int = 100


@dataclass(frozen=True)
class AppConfig:
    tracker: TrackerSettings
    ui_server: UIServerSettings
    source_file: str
    activities: tuple[ActivitySettings, ...] = field(
        default=DEFAULT_ACTIVITY_SETTINGS
    )
