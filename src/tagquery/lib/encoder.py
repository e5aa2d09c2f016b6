"""
Query encoding for tagquery.

This module turns an arbitrary value into `Values`. Four input shapes are
accepted:

- a `str` or bytes-like object, taken as an already-encoded query string
  (one leading ``?`` is dropped);
- a `list` or `tuple` of alternating keys and values; a trailing odd
  element is ignored;
- a mapping of keys to a value or a sequence of values;
- a dataclass instance, walked field by field.

Dataclass fields are encoded according to their annotation (see
`tagquery.lib.tags`). Each public field becomes a query parameter unless its
name is ``-`` or it is empty and marked ``omitempty``. The empty values are
``False``, ``0``, ``None``, any empty string or container, the zero
``datetime.min`` instant, and any object whose ``is_zero()`` returns true.

Per-value rules:

- ``bool`` encodes as ``true``/``false``, or ``1``/``0`` with ``int``.
- ``datetime`` encodes as RFC 3339. ``unix``, ``unixmilli`` and ``unixnano``
  encode epoch counts; ``time_format:<layout>`` (or the ``layout`` metadata)
  formats with strftime. Naive datetimes are taken as UTC.
- Sequences repeat the key once per element. Sets are emitted in sorted
  order of their string forms. ``del:comma``, ``del:space``,
  ``del:semicolon`` or ``del:<token>`` join the elements into one value;
  ``del:brackets`` repeats ``key[]`` instead.
- Nested dataclasses are scoped as ``parent[child]``, or merged into the
  current scope with ``inline`` when the field has no explicit name.
- Everything else uses ``str()``.

Multiple fields encoding to the same key are kept as repeated values.
Records are assumed to be acyclic; ``max_depth`` bounds the nesting when set.
"""

import dataclasses
from collections.abc import Mapping, Sized
from datetime import datetime, timezone
from enum import Enum
from numbers import Number
from typing import Any

from tagquery.lib.config import Config
from tagquery.lib.logger import Logger
from tagquery.lib.tags import (
    DEL,
    INLINE,
    INT,
    OMITEMPTY,
    TIME_FORMAT,
    UNIX,
    UNIXMILLI,
    UNIXNANO,
    TagOptions,
    field_specs,
)
from tagquery.lib.values import QueryError, Values, parse_query

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NO_OPTS = TagOptions()

_SEQUENCE_TYPES = (list, tuple)
_SET_TYPES = (set, frozenset)
BYTES_TYPES = (bytes, bytearray, memoryview)

_DELIMITERS = {
    "comma": ",",
    "space": " ",
    "semicolon": ";",
}
BRACKETS = "brackets"


class UnsupportedKindError(QueryError):
    """Raised when the input is not a string, sequence, mapping or dataclass."""

    pass


class MaxDepthError(QueryError):
    """Raised when nested records exceed the configured depth."""

    pass


class Kind(Enum):
    """Shape of a value once wrappers have been removed."""

    NIL = "nil"
    STRING = "string"
    TIME = "time"
    SEQUENCE = "sequence"
    SET = "set"
    MAPPING = "mapping"
    RECORD = "record"
    SCALAR = "scalar"


def _unwrap(value: Any) -> Any:
    while isinstance(value, Enum):
        value = value.value
    return value


def kind_of(value: Any) -> Kind:
    """Classify an unwrapped value."""

    if value is None:
        return Kind.NIL
    if isinstance(value, (str, *BYTES_TYPES)):
        return Kind.STRING
    if isinstance(value, datetime):
        return Kind.TIME
    if isinstance(value, Mapping):
        return Kind.MAPPING
    if isinstance(value, _SEQUENCE_TYPES):
        return Kind.SEQUENCE
    if isinstance(value, _SET_TYPES):
        return Kind.SET
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return Kind.RECORD
    return Kind.SCALAR


def _is_zero_time(t: datetime) -> bool:
    return t.replace(tzinfo=None) == datetime.min


def is_empty_value(value: Any) -> bool:
    """Check whether a value counts as empty for ``omitempty``."""

    value = _unwrap(value)

    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, Number):
        return value == 0
    if isinstance(value, datetime):
        return _is_zero_time(value)
    if isinstance(value, Sized):
        return len(value) == 0

    is_zero = getattr(value, "is_zero", None)
    if callable(is_zero):
        return bool(is_zero())

    return False


def _strings(seq: Any, opts: TagOptions | None = None) -> list[str]:
    strings = [value_string(item, opts) for item in seq]
    if isinstance(seq, _SET_TYPES):
        # sets have no order of their own
        strings.sort()
    return strings


def _epoch_micros(t: datetime) -> int:
    delta = t - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds


def _rfc3339(t: datetime) -> str:
    stamp = t.replace(tzinfo=None, microsecond=0).isoformat()

    offset = t.utcoffset()
    if not offset:
        return f"{stamp}Z"

    total = int(offset.total_seconds()) // 60
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total), 60)
    return f"{stamp}{sign}{hours:02d}:{minutes:02d}"


def _time_string(t: datetime, opts: TagOptions) -> str:
    if _is_zero_time(t):
        return ""

    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)

    # query:"create_time,unix"
    if opts.contains(UNIX):
        return str(_epoch_micros(t) // 1_000_000)
    if opts.contains(UNIXMILLI):
        return str(_epoch_micros(t) // 1_000)
    if opts.contains(UNIXNANO):
        return str(_epoch_micros(t) * 1_000)

    # query:"create_time,time_format:%Y-%m-%d %H:%M:%S"
    layout = opts.get(TIME_FORMAT)
    if layout:
        return t.strftime(layout)

    return _rfc3339(t)


def value_string(value: Any, opts: TagOptions | None = None) -> str:
    """
    Return the query string form of a single value.

    Never fails; unknown types fall back to ``str()``.

    Args:
        value: The value to convert.
        opts (TagOptions, optional): Options of the field being encoded.

    Returns:
        str: The converted value, empty for ``None``.
    """

    opts = opts if opts is not None else _NO_OPTS
    value = _unwrap(value)

    if value is None:
        return ""

    if isinstance(value, bool):
        # query:"name,int"
        if opts.contains(INT):
            return "1" if value else "0"
        return "true" if value else "false"

    if isinstance(value, datetime):
        return _time_string(value, opts)

    if isinstance(value, BYTES_TYPES):
        return bytes(value).decode("utf-8", errors="replace")

    return str(value)


class Encoder:
    """
    Encode values into `Values`.

    An encoder holds no state between calls and can be shared freely.
    """

    def __init__(self, tag: str | None = None, max_depth: int | None = None):
        """
        Initialize an encoder.

        Args:
            tag (str, optional): Dataclass metadata key holding field
                annotations. Defaults to config value.
            max_depth (int, optional): Deepest record nesting allowed, 0 for
                unbounded. Defaults to config value.
        """

        self.tag = tag if tag is not None else Config.get("encoder", "tag", "query")
        self.max_depth = max_depth if max_depth is not None else Config.get("encoder", "max_depth", 0)

    def values(self, value: Any) -> Values:
        """
        Encode value into a fresh `Values`.

        Raises:
            MalformedQueryError: If a string input has an invalid escape.
            UnsupportedKindError: If the input shape cannot be encoded.
            MaxDepthError: If records nest deeper than ``max_depth``.
        """

        out = Values()
        value = _unwrap(value)
        kind = kind_of(value)

        if kind is Kind.NIL:
            return out

        if kind is Kind.STRING:
            Logger.debug("Parsing pre-encoded query string.")
            if isinstance(value, BYTES_TYPES):
                value = value_string(value)
            return parse_query(value)

        if kind is Kind.MAPPING:
            self._reflect_map(out, value)
        elif kind is Kind.SEQUENCE:
            self._reflect_pairs(out, value)
        elif kind is Kind.RECORD:
            self._reflect_record(out, value, "", 1)
        else:
            raise UnsupportedKindError(f"unsupported kind input. Got {type(value).__name__}")

        return out

    def _reflect_pairs(self, out: Values, seq: Any) -> None:
        items = list(seq)
        for i in range(0, len(items) - 1, 2):
            out.add(value_string(items[i]), value_string(items[i + 1]))

    def _reflect_map(self, out: Values, mapping: Mapping) -> None:
        for k, v in mapping.items():
            key = value_string(k)
            v = _unwrap(v)

            if v is None:
                continue

            if kind_of(v) in (Kind.SEQUENCE, Kind.SET):
                for s in _strings(v):
                    out.add(key, s)
            else:
                out.add(key, value_string(v))

    def _reflect_record(self, out: Values, record: Any, scope: str, depth: int) -> None:
        if self.max_depth and depth > self.max_depth:
            raise MaxDepthError(f"records nested deeper than {self.max_depth} at '{scope}'")

        for spec in field_specs(type(record), self.tag):
            sv = getattr(record, spec.attr)
            opts = spec.opts

            name = spec.name
            if scope:
                name = f"{scope}[{name}]"

            if opts.contains(OMITEMPTY) and is_empty_value(sv):
                continue

            sv = _unwrap(sv)
            kind = kind_of(sv)

            if kind is Kind.NIL:
                continue

            if kind in (Kind.SEQUENCE, Kind.SET):
                self._add_sequence(out, name, sv, opts)
                continue

            if kind is Kind.RECORD:
                if opts.contains(INLINE) and not spec.explicit:
                    self._reflect_record(out, sv, scope, depth + 1)
                else:
                    self._reflect_record(out, sv, name, depth + 1)
                continue

            out.add(name, value_string(sv, opts))

    def _add_sequence(self, out: Values, name: str, seq: Any, opts: TagOptions) -> None:
        items = _strings(seq, opts)
        if not items:
            return

        delimiter = ""
        del_value = opts.get(DEL)
        if del_value == BRACKETS:
            name = f"{name}[]"
        elif del_value:
            delimiter = _DELIMITERS.get(del_value, del_value)

        if delimiter:
            out.add(name, delimiter.join(items))
        else:
            for item in items:
                out.add(name, item)


def values(value: Any) -> Values:
    """Encode value with a default `Encoder`."""

    return Encoder().values(value)


def encode(value: Any) -> str:
    """Encode value and serialize it, sorted by key."""

    return values(value).encode()
