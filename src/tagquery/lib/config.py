"""
Configuration management for tagquery.

This module defines the `Config` singleton class, which loads settings from
a CFG file, applies type conversions, and exposes a `get` method for
retrieving values at runtime. Encoders read their defaults (tag key, nesting
guard) from here when they are not given explicitly.
"""

import configparser
import os
from pathlib import Path
from typing import Any, ClassVar

from tagquery.lib.logger import Logger


class Config:
    """
    Singleton class to load and store configuration settings.

    Values missing from the file fall back to `_defaults`.
    """

    _data: ClassVar[dict[str, dict[str, Any]] | None] = None
    _defaults: ClassVar[dict[str, dict[str, Any]]] = {
        "encoder": {
            "tag": "query",
            "max_depth": 0,
        },
        "dev": {
            "stack_trace_errors": False,
            "log_level": "info",
        },
    }

    # Special post-load normalizers for keys that need custom casting
    _NORMALIZERS = {
        ("dev", "log_level"): "_str_to_level",
        ("encoder", "max_depth"): "_non_negative",
    }

    @classmethod
    def _resolve_config_path(cls) -> str | None:
        """Return a usable tagquery.cfg path (env > repo > /etc) or None."""

        # ENV override
        env = os.getenv("TAGQUERY_CONFIG")
        if env and Path(env).exists():
            return env

        # Repo location fallback
        dev = Path(__file__).resolve().parents[3] / "config" / "tagquery.cfg"
        if dev.exists():
            return str(dev)

        # System-wide location fallback
        p = Path("/etc/tagquery/tagquery.cfg")
        if p.exists():
            return str(p)

        return None

    @classmethod
    def _apply_normalizers(cls, data: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
        """Apply custom normalizers."""

        out = {s: dict(v) for s, v in data.items()}

        for (section, key), func in cls._NORMALIZERS.items():
            if isinstance(func, str):
                func = getattr(cls, func)
            if section in out and key in out[section]:
                out[section][key] = func(out[section][key])

        return out

    @classmethod
    def _str_to_level(cls, level: str | int) -> int:
        """Convert a log level str to its logging level."""

        if isinstance(level, int):
            return level

        levels = {
            "success": Logger.SUCCESS,
            "info": Logger.INFO,
            "warning": Logger.WARNING,
            "error": Logger.ERROR,
            "debug": Logger.DEBUG,
        }

        if level not in levels:
            raise ValueError(f"The level {level} not a valid log level.")

        return levels[level]

    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Expected a non-negative value, got {value}.")

        return value

    @staticmethod
    def _coerce(default_value: Any, raw: str) -> Any:
        """Coerce a string 'raw' into the type of 'default_value'."""

        if raw == "" and default_value is not None:
            return default_value
        if isinstance(default_value, bool):
            return raw.lower() in ("1", "true", "yes", "on")
        if isinstance(default_value, int):
            return int(raw)
        if default_value is None:
            return None if raw == "" else raw

        return raw

    @classmethod
    def _load_defaults(cls) -> None:
        cls._data = cls._apply_normalizers(cls._defaults)

    @classmethod
    def load(cls, filepath: str | None = None) -> None:
        """
        Load the configuration from a file, falling back to defaults.

        Args:
            filepath (str, optional): Path to the configuration file. When
                omitted the path is resolved from the environment.
        """

        explicit = filepath is not None
        filepath = filepath or cls._resolve_config_path()

        if not filepath:
            Logger.debug("No config file resolved. Loading defaults...")
            cls._load_defaults()
            return

        if not os.path.exists(filepath):
            if explicit:
                Logger.warning("No config file found. Loading defaults...")
            cls._load_defaults()
            return

        if not filepath.endswith(".cfg"):
            Logger.warning("Config path does not end with .cfg. Loading defaults...")
            cls._load_defaults()
            return

        cp = configparser.ConfigParser(
            interpolation=None,
            inline_comment_prefixes=("#", ";"),
            strict=True,
        )

        try:
            cp.read(filepath)
        except configparser.MissingSectionHeaderError:
            Logger.warning("Invalid config file. Loading defaults...")
            cls._load_defaults()
            return

        data = {s: dict(v) for s, v in cls._defaults.items()}
        for section, defaults in cls._defaults.items():
            if cp.has_section(section):
                resolved = {}
                for key, dval in defaults.items():
                    if cp.has_option(section, key):
                        raw = cp.get(section, key, raw=True).strip()
                        resolved[key] = cls._coerce(dval, raw)
                    else:
                        resolved[key] = dval
                data[section] = resolved

        Logger.debug(f"Loaded config from '{filepath}'.")
        cls._data = cls._apply_normalizers(data)

    @classmethod
    def get(cls, section: str, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value, loading the configuration on first use.

        A config file that fails to load here is reported and replaced by the
        defaults; call `load` directly to have the error raised.

        Args:
            section (str): The section in the CFG file to retrieve.
            key (str): The key to retrieve.
            default: The default value if the key is not found.

        Returns:
            Any: The configuration value or the default value.
        """

        if cls._data is None:
            try:
                cls.load()
            except ValueError as e:
                Logger.warning(f"Invalid config ({e}). Loading defaults...")
                cls._load_defaults()

        if section not in cls._data:
            return default

        return cls._data[section].get(key, default)
