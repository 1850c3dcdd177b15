import datetime as dt
import unittest

from contracts.ui_protocol import (
    EVENT_SESSION_PAUSED,
    EVENT_SESSION_RESET,
    EVENT_SESSION_RESUMED,
    EVENT_SESSION_SAVED,
    EVENT_SESSION_STARTED,
    EVENT_SYNC_ACTIVITIES,
    EVENT_SYNC_CONTROLS,
    EVENT_SYNC_MODE,
    EVENT_SYNC_TIMER,
    EVENT_SYNC_TRACKED,
)
from pomodoro import BREAK_ACTIVITY, Activity, PomodoroTracker

_NOW = dt.datetime(2026, 2, 21, 10, 0, tzinfo=dt.timezone.utc)


def _tracker(**kwargs) -> PomodoroTracker:
    kwargs.setdefault("now_fn", lambda: _NOW)
    return PomodoroTracker(**kwargs)


class PomodoroTrackerStateMachineTests(unittest.TestCase):
    def test_initial_state_is_idle(self) -> None:
        snapshot = _tracker().snapshot()

        self.assertEqual("idle", snapshot.phase)
        self.assertIsNone(snapshot.current)
        self.assertFalse(snapshot.running)
        self.assertEqual(25 * 60, snapshot.preferred_duration_seconds)
        self.assertEqual(1, snapshot.current_activity.id)
        self.assertEqual((), snapshot.tracked)

    def test_start_pause_resume_cycles_and_emits_lifecycle_topics(self) -> None:
        tracker = _tracker()

        results = [tracker.start_pause_resume() for _ in range(3)]

        self.assertEqual(
            ["running", "paused", "running"],
            [result.snapshot.phase for result in results],
        )
        self.assertEqual(
            [
                (EVENT_SESSION_STARTED,),
                (EVENT_SESSION_PAUSED,),
                (EVENT_SESSION_RESUMED,),
            ],
            [result.topics for result in results],
        )
        self.assertTrue(all(result.accepted for result in results))

    def test_start_uses_preferred_duration_activity_and_flow_mode(self) -> None:
        tracker = _tracker(preferred_duration_seconds=10 * 60, flow_mode=True)
        tracker.set_activity(3)

        session = tracker.start_pause_resume().snapshot.current

        self.assertIsNotNone(session)
        self.assertEqual(10 * 60, session.planned_seconds)
        self.assertEqual(3, session.activity.id)
        self.assertTrue(session.flow_mode)
        self.assertFalse(session.is_break)
        self.assertEqual(_NOW, session.started_at)
        self.assertEqual(0, session.elapsed_seconds)

    def test_start_pause_resume_is_ignored_during_break(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.start_break()

        result = tracker.start_pause_resume()

        self.assertFalse(result.accepted)
        self.assertEqual("break_active", result.reason)
        self.assertEqual((), result.topics)
        self.assertTrue(result.snapshot.running)
        self.assertTrue(result.snapshot.on_break)

    def test_save_archives_current_session(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.tick()
        tracker.tick()

        result = tracker.save()

        self.assertTrue(result.accepted)
        self.assertEqual(
            (EVENT_SESSION_SAVED, EVENT_SYNC_TRACKED, EVENT_SYNC_TIMER),
            result.topics,
        )
        self.assertEqual("idle", result.snapshot.phase)
        self.assertFalse(result.snapshot.running)
        self.assertEqual(1, len(result.snapshot.tracked))
        self.assertEqual(2, result.snapshot.tracked[0].elapsed_seconds)

    def test_save_rejected_without_session(self) -> None:
        result = _tracker().save()

        self.assertFalse(result.accepted)
        self.assertEqual("no_session", result.reason)
        self.assertEqual((), result.topics)

    def test_save_rejected_during_break(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.start_break()

        result = tracker.save()

        self.assertFalse(result.accepted)
        self.assertEqual("break_active", result.reason)
        self.assertEqual(1, len(result.snapshot.tracked))

    def test_save_works_while_paused(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.start_pause_resume()

        result = tracker.save()

        self.assertTrue(result.accepted)
        self.assertEqual(1, len(result.snapshot.tracked))

    def test_reset_is_idempotent(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.tick()

        first = tracker.reset()
        second = tracker.reset()

        self.assertEqual(first.snapshot, second.snapshot)
        self.assertEqual("idle", second.snapshot.phase)
        self.assertEqual((EVENT_SESSION_RESET, EVENT_SYNC_TIMER), second.topics)
        self.assertEqual((), second.snapshot.tracked)

    def test_reset_clears_break(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.start_break()

        snapshot = tracker.reset().snapshot

        self.assertIsNone(snapshot.current)
        self.assertFalse(snapshot.running)

    def test_start_break_installs_break_session(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()

        result = tracker.start_break()

        self.assertTrue(result.accepted)
        self.assertEqual(
            (EVENT_SYNC_TRACKED, EVENT_SYNC_CONTROLS, EVENT_SYNC_TIMER),
            result.topics,
        )
        current = result.snapshot.current
        self.assertTrue(current.is_break)
        self.assertEqual(BREAK_ACTIVITY, current.activity)
        self.assertFalse(current.flow_mode)
        self.assertEqual(5 * 60, current.planned_seconds)
        self.assertTrue(result.snapshot.running)

    def test_start_break_rejected_without_work_session(self) -> None:
        tracker = _tracker()

        idle = tracker.start_break()
        tracker.start_pause_resume()
        tracker.start_break()
        on_break = tracker.start_break()

        self.assertEqual((False, "no_session"), (idle.accepted, idle.reason))
        self.assertEqual((False, "break_active"), (on_break.accepted, on_break.reason))
        self.assertEqual(1, len(on_break.snapshot.tracked))

    def test_toggle_flow_mode_updates_current_work_session(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()

        result = tracker.toggle_flow_mode()

        self.assertTrue(result.snapshot.flow_mode)
        self.assertTrue(result.snapshot.current.flow_mode)
        self.assertEqual(
            (EVENT_SYNC_TIMER, EVENT_SYNC_MODE, EVENT_SYNC_CONTROLS),
            result.topics,
        )

    def test_toggle_flow_mode_leaves_break_untouched(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.start_break()

        result = tracker.toggle_flow_mode()

        self.assertTrue(result.snapshot.flow_mode)
        self.assertFalse(result.snapshot.current.flow_mode)

    def test_toggle_auto_break(self) -> None:
        tracker = _tracker(auto_break=True)

        result = tracker.toggle_auto_break()

        self.assertFalse(result.snapshot.auto_break)
        self.assertEqual((EVENT_SYNC_MODE,), result.topics)

    def test_set_preferred_duration_updates_live_work_session(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()

        result = tracker.set_preferred_duration(40)

        self.assertTrue(result.accepted)
        self.assertEqual(40 * 60, result.snapshot.preferred_duration_seconds)
        self.assertEqual(40 * 60, result.snapshot.current.planned_seconds)
        self.assertEqual((EVENT_SYNC_TIMER, EVENT_SYNC_MODE), result.topics)

    def test_set_preferred_duration_keeps_break_length(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()
        tracker.start_break()

        result = tracker.set_preferred_duration(50)

        self.assertEqual(50 * 60, result.snapshot.preferred_duration_seconds)
        self.assertEqual(5 * 60, result.snapshot.current.planned_seconds)

    def test_set_preferred_duration_ignores_invalid_values(self) -> None:
        tracker = _tracker()

        for value in (0, -5, True):
            result = tracker.set_preferred_duration(value)
            self.assertFalse(result.accepted)
            self.assertEqual("invalid_duration", result.reason)
            self.assertEqual((), result.topics)

        self.assertEqual(25 * 60, tracker.snapshot().preferred_duration_seconds)

    def test_set_activity_updates_selection_and_current_session(self) -> None:
        tracker = _tracker()
        tracker.start_pause_resume()

        result = tracker.set_activity(4)

        self.assertEqual(4, result.snapshot.current_activity.id)
        self.assertEqual("Japanese", result.snapshot.current.activity.name)
        self.assertEqual((EVENT_SYNC_ACTIVITIES,), result.topics)

    def test_set_activity_unknown_id_is_silently_ignored(self) -> None:
        tracker = _tracker()
        before = tracker.snapshot().current_activity

        result = tracker.set_activity(99)

        self.assertTrue(result.accepted)
        self.assertEqual("unknown_activity", result.reason)
        self.assertEqual(before, result.snapshot.current_activity)
        self.assertEqual((), result.topics)

    def test_set_activity_rejects_break_sentinel_id(self) -> None:
        tracker = _tracker()

        result = tracker.set_activity(0)

        self.assertEqual(1, result.snapshot.current_activity.id)

    def test_running_implies_current_session_across_operations(self) -> None:
        tracker = _tracker(preferred_duration_seconds=3)
        operations = [
            tracker.start_pause_resume,
            tracker.tick,
            tracker.toggle_flow_mode,
            tracker.start_pause_resume,
            tracker.save,
            tracker.reset,
            tracker.start_pause_resume,
            tracker.toggle_flow_mode,
            tracker.tick,
            tracker.tick,
            tracker.tick,
            tracker.start_break,
            tracker.tick,
            tracker.save,
            tracker.reset,
            tracker.reset,
        ]

        for operation in operations:
            operation()
            snapshot = tracker.snapshot()
            if snapshot.running:
                self.assertIsNotNone(snapshot.current)

    def test_custom_registry_and_default_activity(self) -> None:
        tracker = _tracker(
            activities=[Activity(id=7, name="Reading"), Activity(id=9, name="Music")],
            default_activity_id=9,
        )

        snapshot = tracker.snapshot()

        self.assertEqual("Music", snapshot.current_activity.name)
        self.assertEqual([7, 9], [activity.id for activity in snapshot.activities])

    def test_constructor_rejects_invalid_settings(self) -> None:
        with self.assertRaises(ValueError):
            PomodoroTracker(preferred_duration_seconds=0)
        with self.assertRaises(ValueError):
            PomodoroTracker(seconds_per_tick=0)
        with self.assertRaises(ValueError):
            PomodoroTracker(default_activity_id=42)
        with self.assertRaises(ValueError):
            PomodoroTracker(activities=[Activity(id=0, name="Nope")])


if __name__ == "__main__":
    unittest.main()
