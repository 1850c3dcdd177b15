"""Render UI regions from a tracker snapshot into JSON-ready payloads."""

from __future__ import annotations

from typing import Any, Callable

from contracts.ui_protocol import (
    REGION_ACTIVITIES,
    REGION_CONTROLS,
    REGION_MODE,
    REGION_TIMER,
    REGION_TRACKED,
)
from pomodoro import Session, TrackerSnapshot
from pomodoro.constants import PHASE_IDLE, PHASE_RUNNING
from pomodoro.formatting import duration_minutes, format_duration, format_work_units


def render_controls(snapshot: TrackerSnapshot) -> dict[str, Any]:
    phase = snapshot.phase
    on_break = snapshot.on_break
    completed = snapshot.completed
    if phase == PHASE_IDLE:
        label = "Start"
    elif phase == PHASE_RUNNING:
        label = "Pause"
    else:
        label = "Resume"
    work_active = phase != PHASE_IDLE and not on_break
    return {
        "phase": phase,
        "running": snapshot.running,
        "on_break": on_break,
        "completed": completed,
        "start_pause_label": label,
        "can_start_pause": not on_break,
        "can_save": work_active,
        "can_reset": phase != PHASE_IDLE,
        "can_start_break": work_active and completed,
        "can_skip_break": on_break,
    }


def render_timer(snapshot: TrackerSnapshot) -> dict[str, Any]:
    current = snapshot.current
    counting_up = (
        current.flow_mode and not current.is_break
        if current is not None
        else snapshot.flow_mode
    )
    return {
        "display": format_duration(snapshot.display_seconds),
        "seconds": snapshot.display_seconds,
        "counting_up": counting_up,
        "on_break": snapshot.on_break,
        "phase": snapshot.phase,
        "elapsed": format_duration(current.elapsed_seconds) if current else "00:00",
        "activity": (current.activity if current else snapshot.current_activity).name,
    }


def _session_view(session: Session) -> dict[str, Any]:
    return {
        "started_at": session.started_at.isoformat(),
        "activity_id": session.activity.id,
        "activity": session.activity.name,
        "time_spent": format_duration(session.elapsed_seconds),
        "planned": format_duration(session.planned_seconds),
        "flow_mode": session.flow_mode,
        "completed": session.completed,
    }


def render_tracked(snapshot: TrackerSnapshot) -> dict[str, Any]:
    total = snapshot.total_tracked_seconds
    return {
        "sessions": [_session_view(session) for session in snapshot.tracked],
        "count": len(snapshot.tracked),
        "total_time": format_duration(total),
        "total_work_units": format_work_units(total),
        "daily_goal": snapshot.daily_goal,
    }


def render_activities(snapshot: TrackerSnapshot) -> dict[str, Any]:
    return {
        "current_id": snapshot.current_activity.id,
        "activities": [
            {
                "id": activity.id,
                "name": activity.name,
                "selected": activity.id == snapshot.current_activity.id,
            }
            for activity in snapshot.activities
        ],
    }


def render_mode(snapshot: TrackerSnapshot) -> dict[str, Any]:
    preferred = 0 if snapshot.flow_mode else snapshot.preferred_duration_seconds
    return {
        "flow_mode": snapshot.flow_mode,
        "auto_break": snapshot.auto_break,
        "preferred_minutes": duration_minutes(snapshot.preferred_duration_seconds),
        "preferred_display": format_duration(preferred),
    }


_RENDERERS: dict[str, Callable[[TrackerSnapshot], dict[str, Any]]] = {
    REGION_CONTROLS: render_controls,
    REGION_TIMER: render_timer,
    REGION_TRACKED: render_tracked,
    REGION_ACTIVITIES: render_activities,
    REGION_MODE: render_mode,
}


def render_region(region: str, snapshot: TrackerSnapshot) -> dict[str, Any]:
    renderer = _RENDERERS.get(region)
    if renderer is None:
        raise KeyError(f"unknown UI region: {region}")
    return renderer(snapshot)
