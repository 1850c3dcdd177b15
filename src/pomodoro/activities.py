"""Activity registry used to label work sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .constants import BREAK_ACTIVITY_ID, BREAK_ACTIVITY_NAME


@dataclass(frozen=True)
class Activity:
    id: int
    name: str


BREAK_ACTIVITY = Activity(id=BREAK_ACTIVITY_ID, name=BREAK_ACTIVITY_NAME)

DEFAULT_ACTIVITIES: tuple[Activity, ...] = (
    Activity(id=1, name="General"),
    Activity(id=2, name="Boot.dev"),
    Activity(id=3, name="Personal projects"),
    Activity(id=4, name="Japanese"),
)


def build_registry(activities: Iterable[Activity]) -> Mapping[int, Activity]:
    """Index activities by id, rejecting duplicates and the reserved break id."""
    registry: dict[int, Activity] = {}
    for activity in activities:
        if activity.id == BREAK_ACTIVITY_ID:
            raise ValueError(f"activity id {BREAK_ACTIVITY_ID} is reserved for breaks")
        if activity.id in registry:
            raise ValueError(f"duplicate activity id: {activity.id}")
        name = " ".join(activity.name.split())
        if not name:
            raise ValueError(f"activity {activity.id} needs a name")
        registry[activity.id] = Activity(id=activity.id, name=name)
    if not registry:
        raise ValueError("at least one activity is required")
    return dict(sorted(registry.items()))
