import io
import logging
import unittest

from colorama import Fore, Style

from tagquery.lib.encoder import Encoder
from tagquery.lib.logger import Logger, SymbolFormatter


def _colored(color, glyph, message):
    return f"{color}{Style.BRIGHT}[{glyph}]{Style.RESET_ALL} {message}\n"


class TestLogger(unittest.TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        Logger.setup(Logger.DEBUG, self.stream)

    def tearDown(self):
        Logger._logger.handlers.clear()
        Logger.set_level(logging.NOTSET)

    def test_setup(self):
        handlers = Logger._logger.handlers

        self.assertEqual(Logger._logger.name, "tagquery")
        self.assertEqual(Logger._logger.level, Logger.DEBUG)
        self.assertEqual(len(handlers), 1)
        self.assertIs(handlers[0].stream, self.stream)
        self.assertIsInstance(handlers[0].formatter, SymbolFormatter)
        self.assertEqual(logging.getLevelName(Logger.SUCCESS), "SUCCESS")

    def test_setup_twice_keeps_one_handler(self):
        other = io.StringIO()
        Logger.setup(Logger.ERROR, other)

        Logger.error("boom")

        self.assertEqual(len(Logger._logger.handlers), 1)
        self.assertEqual(self.stream.getvalue(), "")
        self.assertIn("boom", other.getvalue())

    def test_levels(self):
        cases = [
            (Logger.success, Fore.GREEN, "+", "request sent"),
            (Logger.info, Fore.BLUE, "*", "encoding record"),
            (Logger.warning, Fore.YELLOW, "!", "config missing"),
            (Logger.error, Fore.RED, "-", "bad escape"),
            (Logger.debug, Fore.LIGHTBLACK_EX, ">", "skipped field"),
        ]

        for log, color, glyph, message in cases:
            with self.subTest(glyph=glyph):
                self.stream.seek(0)
                self.stream.truncate()

                log(message)

                self.assertEqual(self.stream.getvalue(), _colored(color, glyph, message))

    def test_unknown_level_symbol(self):
        self.assertIn("[?]", SymbolFormatter.symbol(logging.CRITICAL))

    def test_filtered_below_level(self):
        Logger.set_level("INFO")

        Logger.debug("hidden")
        Logger.info("shown")

        self.assertNotIn("hidden", self.stream.getvalue())
        self.assertIn("shown", self.stream.getvalue())

    def test_records_carry_bare_message(self):
        with self.assertLogs(Logger.NAME, level="WARNING") as cm:
            Logger.warning("plain text")

        self.assertEqual(cm.records[0].getMessage(), "plain text")

    def test_encoder_debug_log(self):
        Encoder(tag="query", max_depth=0).values("a=1")

        self.assertIn("Parsing pre-encoded query string.", self.stream.getvalue())
