"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_ACTIVITY_SETTINGS,
    ActivitySettings,
    AppConfig,
    AppConfigurationError,
    TrackerSettings,
    UIServerSettings,
)

_BREAK_ACTIVITY_ID = 0


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    activities = _parse_activities(raw.get("activities"))
    tracker = _parse_tracker_settings(_section(raw, "tracker"))
    if tracker.default_activity not in {activity.id for activity in activities}:
        raise AppConfigurationError(
            f"tracker.default_activity {tracker.default_activity} "
            "is not a configured activity id."
        )
    ui_server = _parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir)

    return AppConfig(
        tracker=tracker,
        ui_server=ui_server,
        source_file=source_file,
        activities=activities,
    )


def _parse_tracker_settings(section: Mapping[str, Any]) -> TrackerSettings:
    settings = TrackerSettings(
        preferred_duration_minutes=_as_int(
            section.get("preferred_duration_minutes", 25),
            "tracker.preferred_duration_minutes",
        ),
        daily_goal=_as_int(section.get("daily_goal", 8), "tracker.daily_goal"),
        flow_mode=_as_bool(section.get("flow_mode", False), "tracker.flow_mode"),
        auto_break=_as_bool(section.get("auto_break", True), "tracker.auto_break"),
        default_activity=_as_int(
            section.get("default_activity", 1),
            "tracker.default_activity",
        ),
        seconds_per_tick=_as_int(
            section.get("seconds_per_tick", 1),
            "tracker.seconds_per_tick",
        ),
        tick_interval_seconds=_as_float(
            section.get("tick_interval_seconds", 1.0),
            "tracker.tick_interval_seconds",
        ),
        ping_interval_seconds=_as_float(
            section.get("ping_interval_seconds", 10.0),
            "tracker.ping_interval_seconds",
        ),
    )
    _require_positive(settings.preferred_duration_minutes, "tracker.preferred_duration_minutes")
    _require_positive(settings.daily_goal, "tracker.daily_goal")
    _require_positive(settings.seconds_per_tick, "tracker.seconds_per_tick")
    _require_positive(settings.tick_interval_seconds, "tracker.tick_interval_seconds")
    _require_positive(settings.ping_interval_seconds, "tracker.ping_interval_seconds")
    return settings


def _parse_activities(raw: Any) -> tuple[ActivitySettings, ...]:
    if raw is None:
        return DEFAULT_ACTIVITY_SETTINGS
    if not isinstance(raw, list) or not raw:
        raise AppConfigurationError("[[activities]] must be a non-empty array of tables.")

    activities: list[ActivitySettings] = []
    seen: set[int] = set()
    for index, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            raise AppConfigurationError(f"activities[{index}] must be a table.")
        activity_id = _as_int(entry.get("id"), f"activities[{index}].id")
        name = _as_str(entry.get("name"), f"activities[{index}].name")
        if activity_id == _BREAK_ACTIVITY_ID:
            raise AppConfigurationError(
                f"activities[{index}].id {_BREAK_ACTIVITY_ID} is reserved for breaks."
            )
        if activity_id in seen:
            raise AppConfigurationError(f"activities[{index}].id {activity_id} is duplicated.")
        if not name:
            raise AppConfigurationError(f"activities[{index}].name is required.")
        seen.add(activity_id)
        activities.append(ActivitySettings(id=activity_id, name=name))
    return tuple(activities)


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
        subscriber_queue_size=_as_int(
            section.get("subscriber_queue_size", 100),
            "ui_server.subscriber_queue_size",
        ),
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _require_positive(value: float, field: str) -> None:
    if value <= 0:
        raise AppConfigurationError(f"{field} must be greater than zero.")


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
