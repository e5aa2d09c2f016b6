import os
import tempfile
import textwrap
import unittest
from unittest.mock import patch

from tagquery.lib.config import Config
from tagquery.lib.encoder import Encoder, encode
from tagquery.lib.logger import Logger


class TestConfig(unittest.TestCase):
    def setUp(self):
        fd, path = tempfile.mkstemp(prefix="tagquery_", suffix=".cfg")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(textwrap.dedent(
                """
                    [encoder]
                    tag = url                 # metadata key
                    max_depth = 4

                    [dev]
                    log_level = debug
                    stack_trace_errors = true
                """
            ).lstrip())

        self.path = path
        Config.load(self.path)

    def tearDown(self):
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        Config._data = None

    def test_loaded(self):
        self.assertEqual(Config.get("encoder", "tag"), "url")
        self.assertEqual(Config.get("encoder", "max_depth"), 4)
        self.assertEqual(Config.get("dev", "log_level"), Logger.DEBUG)
        self.assertEqual(Config.get("dev", "stack_trace_errors"), True)

    def test_fallback(self):
        self.assertFalse(Config.get("encodr", "unknown"))
        self.assertEqual(Config.get("encodr", "new_property", "new_value"), "new_value")
        self.assertEqual(Config.get("encoder", "unknown_property", "unknown_value"), "unknown_value")

    def test_encoder_defaults(self):
        encoder = Encoder()

        self.assertEqual(encoder.tag, "url")
        self.assertEqual(encoder.max_depth, 4)

    def test_encoder_overrides(self):
        encoder = Encoder(tag="query", max_depth=0)

        self.assertEqual(encoder.tag, "query")
        self.assertEqual(encoder.max_depth, 0)

    def test_partial_file(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("[dev]\nlog_level = warning\n")
        Config.load(self.path)

        self.assertEqual(Config.get("dev", "log_level"), Logger.WARNING)
        self.assertEqual(Config.get("dev", "stack_trace_errors"), False)
        self.assertEqual(Config.get("encoder", "tag"), "query")

    def test_invalid_log_level(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("[dev]\nlog_level = loud\n")

        with self.assertRaises(ValueError):
            Config.load(self.path)

    def test_negative_max_depth(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("[encoder]\nmax_depth = -1\n")

        with self.assertRaises(ValueError):
            Config.load(self.path)

    def test_load_missing_config(self):
        missing = os.path.join(tempfile.gettempdir(), "definitely_not_here.cfg")
        with patch("tagquery.lib.logger.Logger.warning") as warn:
            Config.load(missing)
            warn.assert_called()

        self.assertEqual(Config.get("encoder", "tag"), "query")
        self.assertEqual(Config.get("dev", "log_level"), Logger.INFO)

    def test_load_wrong_extension(self):
        fd, path = tempfile.mkstemp(prefix="tagquery_", suffix=".ini")
        os.close(fd)
        try:
            with patch("tagquery.lib.logger.Logger.warning") as warn:
                Config.load(path)
                warn.assert_called()
        finally:
            os.remove(path)

        self.assertEqual(Config.get("encoder", "max_depth"), 0)

    def test_missing_section_header(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("tag = url\n")

        with patch("tagquery.lib.logger.Logger.warning") as warn:
            Config.load(self.path)
            warn.assert_called()

        self.assertEqual(Config.get("encoder", "tag"), "query")

    def test_env_override(self):
        with patch.dict(os.environ, {"TAGQUERY_CONFIG": self.path}):
            Config._data = None
            self.assertEqual(Config.get("encoder", "tag"), "url")

    def test_lazy_load(self):
        Config._data = None

        with patch.object(Config, "_resolve_config_path", return_value=None):
            self.assertEqual(Config.get("encoder", "tag"), "query")

    def test_lazy_load_invalid_falls_back(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("[dev]\nlog_level = loud\n")
        Config._data = None

        with patch.dict(os.environ, {"TAGQUERY_CONFIG": self.path}), \
                patch("tagquery.lib.logger.Logger.warning") as warn:
            self.assertEqual(encode({"a": 1}), "a=1")
            warn.assert_called()

        self.assertEqual(Config.get("dev", "log_level"), Logger.INFO)
        self.assertEqual(Config.get("encoder", "max_depth"), 0)
