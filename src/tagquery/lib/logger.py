"""
Logging for tagquery.

`Logger` is a class-level facade over the stdlib ``tagquery`` logger. The
colored status symbol (``[+]``, ``[*]``, ``[!]``, ``[-]``, ``[>]``) is added by
the handler's formatter, so records seen by other handlers carry the bare
message. Until `Logger.setup` is called no handler is attached and library
code stays silent below WARNING.
"""

import logging
from typing import IO

from colorama import Fore, Style


class SymbolFormatter(logging.Formatter):
    """Prefix each message with the colored symbol of its level."""

    SYMBOLS = {
        25: (Fore.GREEN, "+"),
        logging.INFO: (Fore.BLUE, "*"),
        logging.WARNING: (Fore.YELLOW, "!"),
        logging.ERROR: (Fore.RED, "-"),
        logging.DEBUG: (Fore.LIGHTBLACK_EX, ">"),
    }

    def __init__(self) -> None:
        super().__init__("%(message)s")

    @classmethod
    def symbol(cls, level: int) -> str:
        color, glyph = cls.SYMBOLS.get(level, (Fore.WHITE, "?"))
        return f"{color}{Style.BRIGHT}[{glyph}]{Style.RESET_ALL}"

    def format(self, record: logging.LogRecord) -> str:
        return f"{self.symbol(record.levelno)} {super().format(record)}"


class Logger:
    """A singleton class for handling formatted and colored logging."""

    NAME = "tagquery"

    _logger: logging.Logger = logging.getLogger(NAME)

    SUCCESS = 25
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    DEBUG = logging.DEBUG

    @classmethod
    def set_level(cls, level: int | str) -> None:
        cls._logger.setLevel(level)

    @classmethod
    def setup(cls, log_level: int, stream: IO[str] | None = None) -> None:
        """
        Attach a single symbol-formatting stream handler.

        Handlers from an earlier call are replaced.

        Args:
            log_level (int): The log level to set.
            stream (IO[str], optional): Target stream. Defaults to stderr.
        """

        logging.addLevelName(cls.SUCCESS, "SUCCESS")

        handler = logging.StreamHandler(stream)
        handler.setFormatter(SymbolFormatter())

        cls._logger.handlers.clear()
        cls._logger.addHandler(handler)
        cls._logger.setLevel(log_level)

    @classmethod
    def success(cls, message: str) -> None:
        cls._logger.log(cls.SUCCESS, message)

    @classmethod
    def info(cls, message: str) -> None:
        cls._logger.info(message)

    @classmethod
    def warning(cls, message: str) -> None:
        cls._logger.warning(message)

    @classmethod
    def error(cls, message: str) -> None:
        cls._logger.error(message)

    @classmethod
    def debug(cls, message: str) -> None:
        cls._logger.debug(message)
