"""
Unit tests for configuration loading and settings validation.
"""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from gpadder.config import Config, Settings


class TestConfig(unittest.TestCase):
    """Test configuration sources and dot-notation access."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.temp_dir, ignore_errors=True)

    def test_defaults(self):
        config = Config(load_user_config=False, load_env=False)

        self.assertEqual(config.get("input.scan_width"), 4)
        self.assertEqual(config.get("input.rescan_interval"), 3.0)
        self.assertFalse(config.get("input.auto_switch"))
        self.assertIsNone(config.get("input.diagnostic_log"))

    def test_missing_key_default(self):
        config = Config(load_user_config=False, load_env=False)
        self.assertEqual(config.get("input.nothing", 7), 7)
        self.assertEqual(config.get("input.scan_width.deeper", "x"), "x")

    def test_file_overrides_defaults(self):
        path = Path(self.temp_dir) / "gpadder.json"
        path.write_text(json.dumps({"input": {"scan_width": 8, "auto_switch": True}}), encoding="utf-8")

        config = Config(path, load_user_config=False, load_env=False)

        self.assertEqual(config.get("input.scan_width"), 8)
        self.assertTrue(config.get("input.auto_switch"))
        # Untouched keys keep their defaults
        self.assertEqual(config.get("input.stick_deadzone"), 0.2)

    def test_invalid_file_keeps_defaults(self):
        path = Path(self.temp_dir) / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with patch("builtins.print"):
            config = Config(path, load_user_config=False, load_env=False)

        self.assertEqual(config.get("input.scan_width"), 4)

    def test_environment_overrides(self):
        env = {
            "GPADDER_INPUT_SCAN_WIDTH": "6",
            "GPADDER_INPUT_AUTO_SWITCH": "yes",
            "GPADDER_INPUT_DIAGNOSTIC_LOG": "/tmp/gpadder-events.log",
        }
        with patch.dict(os.environ, env):
            config = Config(load_user_config=False)

        self.assertEqual(config.get("input.scan_width"), 6)
        self.assertTrue(config.get("input.auto_switch"))
        self.assertEqual(config.get("input.diagnostic_log"), "/tmp/gpadder-events.log")

    def test_set_and_reset(self):
        config = Config(load_user_config=False, load_env=False)
        config.set("input.scan_width", 2)
        self.assertEqual(config.get("input.scan_width"), 2)

        config.reset_to_defaults()
        self.assertEqual(config.get("input.scan_width"), 4)

    def test_save_round_trip(self):
        config = Config(load_user_config=False, load_env=False)
        config.set("input.rescan_interval", 5.0)
        path = Path(self.temp_dir) / "nested" / "saved.json"
        config.save(path)

        reloaded = Config(path, load_user_config=False, load_env=False)
        self.assertEqual(reloaded.get("input.rescan_interval"), 5.0)

    def test_get_all_is_a_copy(self):
        config = Config(load_user_config=False, load_env=False)
        snapshot = config.get_all()
        snapshot["input"]["scan_width"] = 99

        self.assertEqual(config.get("input.scan_width"), 4)


class TestSettings(unittest.TestCase):
    """Test validated settings properties."""

    def setUp(self):
        self.config = Config(load_user_config=False, load_env=False)
        self.settings = Settings(self.config)

    def test_defaults(self):
        self.assertEqual(self.settings.scan_width, 4)
        self.assertEqual(self.settings.rescan_interval, 3.0)
        self.assertEqual(self.settings.auto_switch_interval, 0.0)
        self.assertEqual(self.settings.trigger_threshold, 0.1)
        self.assertIsNone(self.settings.diagnostic_log)

    def test_scan_width_clamped(self):
        self.config.set("input.scan_width", 100)
        self.assertEqual(self.settings.scan_width, 16)
        self.config.set("input.scan_width", 0)
        self.assertEqual(self.settings.scan_width, 1)

    def test_rescan_interval_clamped(self):
        self.config.set("input.rescan_interval", 0)
        self.assertEqual(self.settings.rescan_interval, 0.1)

    def test_log_level_validation(self):
        self.config.set("app.log_level", "chatty")
        self.assertEqual(self.settings.log_level, "INFO")
        self.config.set("app.log_level", "debug")
        self.assertEqual(self.settings.log_level, "DEBUG")
        self.assertTrue(self.settings.is_development_mode())

    def test_diagnostic_log_path(self):
        self.config.set("input.diagnostic_log", "~/events.log")
        self.assertEqual(self.settings.diagnostic_log, Path("~/events.log").expanduser())

    def test_input_info(self):
        info = self.settings.get_input_info()
        self.assertEqual(info["scan_width"], 4)
        self.assertIn("axis_deadzone", info)


if __name__ == "__main__":
    unittest.main()
