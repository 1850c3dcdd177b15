import os
import sys
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from app_config import (
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _load(content: str):
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "config.toml"
        _write_text(config_path, textwrap.dedent(content).strip())
        return load_app_config(str(config_path))


class AppConfigLoadingTests(unittest.TestCase):
    def test_empty_config_uses_defaults(self) -> None:
        app_config = _load("")

        self.assertEqual(25, app_config.tracker.preferred_duration_minutes)
        self.assertEqual(8, app_config.tracker.daily_goal)
        self.assertTrue(app_config.tracker.auto_break)
        self.assertEqual(1, app_config.tracker.seconds_per_tick)
        self.assertEqual(
            ["General", "Boot.dev", "Personal projects", "Japanese"],
            [activity.name for activity in app_config.activities],
        )
        self.assertEqual(100, app_config.ui_server.subscriber_queue_size)
        self.assertEqual("", app_config.ui_server.index_file)

    def test_load_app_config_parses_sections(self) -> None:
        app_config = _load(
            """
            [tracker]
            preferred_duration_minutes = 50
            daily_goal = 6
            flow_mode = "yes"
            auto_break = false
            default_activity = 12
            seconds_per_tick = 60
            tick_interval_seconds = 0.5

            [[activities]]
            id = 12
            name = " Reading "

            [[activities]]
            id = 13
            name = "Music"

            [ui_server]
            port = 9000
            subscriber_queue_size = 16
            """
        )

        tracker = app_config.tracker
        self.assertEqual((50, 6, True, False), (
            tracker.preferred_duration_minutes,
            tracker.daily_goal,
            tracker.flow_mode,
            tracker.auto_break,
        ))
        self.assertEqual(12, tracker.default_activity)
        self.assertEqual(60, tracker.seconds_per_tick)
        self.assertEqual(0.5, tracker.tick_interval_seconds)
        self.assertEqual(["Reading", "Music"], [a.name for a in app_config.activities])
        self.assertEqual(9000, app_config.ui_server.port)
        self.assertEqual(16, app_config.ui_server.subscriber_queue_size)

    def test_load_app_config_resolves_relative_index_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            config_path = root / "config.toml"
            _write_text(config_path, '[ui_server]\nindex_file = "web/index.html"\n')

            app_config = load_app_config(str(config_path))

            self.assertEqual(str(config_path), app_config.source_file)
            self.assertEqual(
                str((root / "web/index.html").resolve()),
                app_config.ui_server.index_file,
            )

    def test_rejects_reserved_and_duplicate_activity_ids(self) -> None:
        reserved = '[[activities]]\nid = 0\nname = "Nap"\n'
        duplicate = (
            '[[activities]]\nid = 1\nname = "A"\n'
            '[[activities]]\nid = 1\nname = "B"\n'
        )

        with self.assertRaises(AppConfigurationError) as reserved_error:
            _load(reserved)
        with self.assertRaises(AppConfigurationError) as duplicate_error:
            _load(duplicate)

        self.assertIn("reserved", str(reserved_error.exception))
        self.assertIn("duplicated", str(duplicate_error.exception))

    def test_rejects_unknown_default_activity(self) -> None:
        with self.assertRaises(AppConfigurationError) as context:
            _load("[tracker]\ndefault_activity = 9\n")

        self.assertIn("tracker.default_activity", str(context.exception))

    def test_type_errors_name_the_field(self) -> None:
        with self.assertRaises(AppConfigurationError) as context:
            _load("[tracker]\ndaily_goal = true\n")

        self.assertIn("tracker.daily_goal", str(context.exception))

    def test_rejects_non_positive_values(self) -> None:
        with self.assertRaises(AppConfigurationError) as context:
            _load("[tracker]\nseconds_per_tick = 0\n")

        self.assertIn("tracker.seconds_per_tick", str(context.exception))

    def test_rejects_non_table_section(self) -> None:
        with self.assertRaises(AppConfigurationError):
            _load('tracker = "fast"\n')

    def test_load_app_config_reports_missing_file_and_bad_toml(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            missing = Path(temp_dir) / "missing.toml"
            broken = Path(temp_dir) / "broken.toml"
            _write_text(broken, "[tracker\n")

            with self.assertRaises(AppConfigurationError):
                load_app_config(str(missing))
            with self.assertRaises(AppConfigurationError) as context:
                load_app_config(str(broken))

            self.assertIn("Failed to parse", str(context.exception))

    def test_resolve_config_path_reads_environment_variable(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "custom.toml"
            _write_text(config_path, "")

            with patch.dict(os.environ, {"APP_CONFIG_FILE": str(config_path)}):
                resolved = resolve_config_path()

            self.assertEqual(config_path.resolve(), resolved)

    def test_resolve_config_path_uses_executable_dir_fallback_in_frozen_mode(self) -> None:
        with tempfile.TemporaryDirectory() as cwd_dir, tempfile.TemporaryDirectory() as exe_dir:
            cwd = Path(cwd_dir)
            executable_dir_config = Path(exe_dir) / "config.toml"
            _write_text(executable_dir_config, "[tracker]\ndaily_goal = 4\n")
            executable = Path(exe_dir) / "main"

            with patch.dict(os.environ, {}, clear=True):
                with patch("app_config.Path.cwd", return_value=cwd):
                    with patch.object(sys, "frozen", True, create=True):
                        with patch.object(sys, "executable", str(executable), create=True):
                            resolved = resolve_config_path()

            self.assertEqual(executable_dir_config.resolve(), resolved)


if __name__ == "__main__":
    unittest.main()
