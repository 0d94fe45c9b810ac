"""
Tests for configuration loading.
"""

import os
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.append(os.path.join(os.path.dirname(__file__), "../../../main/python"))
from bounded_fib.config import CONFIG_PATH_ENV, DEFAULT_CONFIG, ENV_OVERRIDES, load_config
from bounded_fib.errors import ConfigurationError
from bounded_fib.sequence import MAX_COUNT


class TestLoadConfig(unittest.TestCase):
    """Test cases for load_config()."""

    def setUp(self):
        """Start every test from an environment without overrides."""
        self.env_patcher = patch.dict(os.environ)
        self.env_patcher.start()
        for name in list(ENV_OVERRIDES) + [CONFIG_PATH_ENV]:
            os.environ.pop(name, None)

        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.env_patcher.stop()
        self.tmpdir.cleanup()

    def _write(self, text):
        path = os.path.join(self.tmpdir.name, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_defaults(self):
        config = load_config()
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertIsNot(config["collection"], DEFAULT_CONFIG["collection"])

    def test_yaml_file(self):
        path = self._write("count: 15\nwidth: 32\ncollection: [7, 8, 9]\n")
        config = load_config(path)
        self.assertEqual(config["count"], 15)
        self.assertEqual(config["width"], 32)
        self.assertEqual(config["collection"], [7, 8, 9])
        self.assertEqual(config["port"], DEFAULT_CONFIG["port"])

    def test_path_from_environment(self):
        os.environ[CONFIG_PATH_ENV] = self._write("count: 4\n")
        self.assertEqual(load_config()["count"], 4)

    def test_empty_yaml_file(self):
        self.assertEqual(load_config(self._write("")), DEFAULT_CONFIG)

    def test_environment_overrides_file(self):
        path = self._write("count: 15\nport: 6000\n")
        os.environ["BOUNDED_FIB_COUNT"] = "20"
        os.environ["MODULE_PORT"] = "7000"
        os.environ["MODULE_HOST"] = "127.0.0.1"
        config = load_config(path)
        self.assertEqual(config["count"], 20)
        self.assertEqual(config["port"], 7000)
        self.assertEqual(config["host"], "127.0.0.1")

    def test_max_count(self):
        self.assertEqual(load_config()["max_count"], MAX_COUNT)
        self.assertEqual(load_config(self._write("max_count: 50\n"))["max_count"], 50)
        os.environ["BOUNDED_FIB_MAX_COUNT"] = "30"
        self.assertEqual(load_config()["max_count"], 30)

    def test_bad_environment_value(self):
        os.environ["BOUNDED_FIB_WIDTH"] = "wide"
        with self.assertRaises(ConfigurationError):
            load_config()

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_config(os.path.join(self.tmpdir.name, "missing.yaml"))

    def test_invalid_values(self):
        cases = [
            "count: -1\n",
            "count: ten\n",
            "width: 0\n",
            f"max_count: {MAX_COUNT + 1}\n",
            "max_count: -1\n",
            "count: 20\nmax_count: 10\n",
            "collection: [1, two]\n",
            "port: 70000\n",
            "colour: blue\n",
            "- just\n- a list\n",
            "count: [unclosed\n",
        ]
        for text in cases:
            with self.subTest(text=text):
                with self.assertRaises(ConfigurationError):
                    load_config(self._write(text))


if __name__ == "__main__":
    unittest.main()
