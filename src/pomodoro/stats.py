"""Read-only aggregation of tracked sessions into daily and efficiency stats."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from .constants import DEFAULT_DAILY_GOAL
from .service import Session

LOOKBACK_WINDOWS_DAYS: tuple[int, ...] = (7, 14, 30, 60, 90, 120, 180)


@dataclass(frozen=True)
class EfficiencyStats:
    average_sessions: float = 0.0
    hours: float = 0.0
    efficiency_percent: float = 0.0
    missing_sessions: int = 0
    days_selected: int = 0


@dataclass(frozen=True)
class DailyStat:
    date: str
    sessions: int


def calculate_efficiency(
    days: int,
    sessions: Iterable[Session],
    *,
    daily_goal: int = DEFAULT_DAILY_GOAL,
    now: Optional[datetime] = None,
) -> EfficiencyStats:
    """Compare the sessions of the last ``days`` days against the daily goal.

    Breaks and flow sessions are excluded; a session without elapsed time
    counts with its planned duration.
    """
    if days <= 0:
        return EfficiencyStats()

    end = now or datetime.now(timezone.utc)
    start = end - timedelta(days=days)

    total_sessions = 0
    total_seconds = 0
    for session in sessions:
        if session.is_break or session.flow_mode:
            continue
        if not start < session.started_at < end:
            continue
        total_sessions += 1
        if session.elapsed_seconds > 0:
            total_seconds += session.elapsed_seconds
        else:
            total_seconds += session.planned_seconds

    average = total_sessions / days
    efficiency = (average / daily_goal) * 100.0 if daily_goal > 0 else 0.0
    missing = 0
    if average < daily_goal:
        missing = int(daily_goal * days - total_sessions)

    return EfficiencyStats(
        average_sessions=average,
        hours=total_seconds / 3600.0,
        efficiency_percent=efficiency,
        missing_sessions=missing,
        days_selected=days,
    )


def calculate_daily_stats(sessions: Iterable[Session]) -> list[DailyStat]:
    counts: dict[str, int] = {}
    for session in sessions:
        if session.is_break:
            continue
        day = session.started_at.date().isoformat()
        counts[day] = counts.get(day, 0) + 1
    return [DailyStat(date=day, sessions=count) for day, count in sorted(counts.items())]


def build_stats_document(
    sessions: Iterable[Session],
    *,
    daily_goal: int = DEFAULT_DAILY_GOAL,
    now: Optional[datetime] = None,
) -> dict[str, object]:
    """JSON-ready stats over every lookback window plus per-day counts."""
    history = tuple(sessions)
    return {
        "daily_goal": daily_goal,
        "efficiency": [
            asdict(calculate_efficiency(days, history, daily_goal=daily_goal, now=now))
            for days in LOOKBACK_WINDOWS_DAYS
        ],
        "daily": [asdict(stat) for stat in calculate_daily_stats(history)],
    }
