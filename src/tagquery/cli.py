#!/usr/bin/env python3
import argparse
import os
import sys
from pathlib import Path
from typing import Any

import yaml

from tagquery import __version__
from tagquery.lib.codec import get_codec
from tagquery.lib.config import Config
from tagquery.lib.encoder import Encoder
from tagquery.lib.logger import Logger
from tagquery.lib.url import append_query
from tagquery.lib.values import QueryError


def _read_source(source: str | None) -> str:
    """Return the raw input text from stdin, a file path, or the argument itself."""

    if source is None or source == "-":
        return sys.stdin.read()

    if os.path.isfile(source):
        return Path(source).read_text(encoding="utf-8")

    return source


def _load_input(source: str | None, fmt: str = "json") -> Any:
    """
    Load the value to encode, decoding it with the codec registered as fmt.

    Objects become mappings, arrays become key/value pairs and strings are
    pre-encoded queries. Text the codec cannot decode is taken as a
    pre-encoded query string.
    """

    text = _read_source(source).strip()
    try:
        return get_codec(fmt).unmarshal(text.encode("utf-8"))
    except (ValueError, yaml.YAMLError):
        Logger.debug(f"Input is not {fmt}. Treating it as a query string.")
        return text


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argparse parser with subcommands."""

    parser = argparse.ArgumentParser(prog="tagquery", description="tagquery CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_version = sub.add_parser("version", help="Print the package version")
    p_version.set_defaults(handler=cmd_version)

    p_encode = sub.add_parser("encode", help="Encode JSON or YAML input as a query string")
    p_encode.add_argument("input", nargs="?", help="Input text, a file path, or '-' for stdin")
    p_encode.add_argument("--url", help="Append the query to this URL instead of printing it alone")
    p_encode.add_argument("--format", choices=["json", "yaml"], default="json", help="Input format (default: json)")
    p_encode.set_defaults(handler=cmd_encode)

    return parser


def cmd_version(_: argparse.Namespace) -> int:
    """
    Print the package version.

    Args:
        _ (argparse.Namespace): Unused argparse namespace.

    Returns:
        int: Process exit code (0 on success).
    """

    print(__version__)
    return 0


def cmd_encode(ns: argparse.Namespace) -> int:
    try:
        value = _load_input(ns.input, ns.format)
        Logger.debug(f"Encoding {type(value).__name__} input...")

        query = Encoder().values(value).encode()
        print(append_query(ns.url, query) if ns.url else query)
        return 0

    except QueryError as e:
        if Config.get("dev", "stack_trace_errors", False):
            raise

        Logger.error(f"Failed to encode input: {e}")
        return 1
    except OSError as e:
        Logger.error(f"Failed to read input: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the `tagquery` CLI.

    Initializes logging, loads configuration, and dispatches subcommands.

    Args:
        argv (list[str] | None): Arguments excluding the executable; if None, uses sys.argv[1:].

    Returns:
        int: Process exit code.
    """

    Logger.setup(Logger.WARNING)

    Config.load()
    Logger.set_level(Config.get("dev", "log_level", Logger.INFO))

    if Config.get("dev", "stack_trace_errors", False):
        Logger.debug("Stack trace errors enabled.")

    parser = _build_parser()
    ns = parser.parse_args(argv)
    return ns.handler(ns)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        if Config.get("dev", "stack_trace_errors", False):
            raise
        Logger.error(f"Error: {e}")
        sys.exit(1)
