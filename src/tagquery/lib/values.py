"""
Values - ordered multi-map of query keys to string values.

.get() for first value, .getlist() for all. `encode` sorts by key.
"""

import re
from collections.abc import Iterator
from urllib.parse import quote_plus as _quote_plus
from urllib.parse import unquote_plus as _unquote_plus

_BAD_ESCAPE_RE = re.compile(r"%(?![0-9a-fA-F]{2})")


class QueryError(Exception):
    """Base class for errors raised while building query values."""

    pass


class MalformedQueryError(QueryError):
    """Raised when a pre-encoded query string has an invalid escape."""

    pass


class Values:
    """Query values, keyed by name, with repeated keys kept in insertion order."""

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = {}
        for key, vals in (data or {}).items():
            self._data[key] = list(vals)

    def add(self, key: str, value: str) -> None:
        """Append value to the values already stored under key."""
        if key in self._data:
            self._data[key].append(value)
        else:
            self._data[key] = [value]

    def set(self, key: str, value: str) -> None:
        """Replace any values under key with value."""
        self._data[key] = [value]

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def get(self, key: str, default: str | None = None) -> str | None:
        """First value for key, or default."""
        vals = self._data.get(key)
        return vals[0] if vals else default

    def getlist(self, key: str) -> list[str]:
        """All values for key."""
        vals = self._data.get(key)
        return list(vals) if vals else []

    def keys(self) -> list[str]:
        return list(self._data)

    def items(self) -> list[tuple[str, str]]:
        """All key-value pairs, flattened."""
        return [(k, v) for k, vals in self._data.items() for v in vals]

    def to_dict(self) -> dict[str, list[str]]:
        return {k: list(vals) for k, vals in self._data.items()}

    def encode(self) -> str:
        """
        Serialize into "URL encoded" form, sorted by key.

        Keys and values are percent-encoded with spaces as ``+``. Bytes that
        `parse_query` could not decode as UTF-8 are written back unchanged.
        """
        parts = []
        for key in sorted(self._data):
            k = _escape(key)
            for v in self._data[key]:
                parts.append(f"{k}={_escape(v)}")
        return "&".join(parts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __bool__(self) -> bool:
        return bool(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Values):
            return self._data == other._data
        if isinstance(other, dict):
            return self._data == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Values({self._data!r})"


def _escape(text: str) -> str:
    return _quote_plus(text, safe="", errors="surrogateescape")


def _unescape(text: str) -> str:
    if _BAD_ESCAPE_RE.search(text):
        raise MalformedQueryError(f"invalid URL escape in {text!r}")
    if "%" in text or "+" in text:
        # undecodable bytes survive as surrogates
        return _unquote_plus(text, errors="surrogateescape")
    return text


def parse_query(query: str) -> Values:
    """
    Parse an already-encoded query string into Values.

    One leading ``?`` is stripped. Pairs without ``=`` get an empty value.

    Raises:
        MalformedQueryError: If a key or value holds an invalid ``%`` escape,
            or a pair holds a raw ``;``.
    """
    if query.startswith("?"):
        query = query[1:]

    values = Values()
    for pair in query.split("&"):
        if not pair:
            continue
        if ";" in pair:
            raise MalformedQueryError(f"invalid semicolon separator in query {pair!r}")

        k, _, v = pair.partition("=")
        values.add(_unescape(k), _unescape(v))

    return values
