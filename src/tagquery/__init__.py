"""
# tagquery Technical Documentation

tagquery encodes Python values into URL query strings. Dataclasses are
walked field by field and encoded according to compact per-field
annotations; mappings, key/value pair sequences and pre-encoded strings are
accepted as well.

---

## Quick Start

```python
from dataclasses import dataclass
from tagquery import encode, query_field

@dataclass
class Search:
    index: list[str] = query_field("index", default_factory=list)
    token: str = query_field("token,omitempty", default="")

encode(Search(index=["1", "2"]))  # "index=1&index=2"
```

---

## Annotation Options

- `-` as the name skips the field.
- `omitempty` skips empty values.
- `int` encodes booleans as `1`/`0`.
- `unix`, `unixmilli`, `unixnano` encode datetimes as epoch counts.
- `time_format:<layout>` formats datetimes with strftime.
- `inline` merges a nested dataclass into the parent scope.
- `del:<token>` joins sequences (`comma`, `space`, `semicolon`, or any
  literal); `del:brackets` repeats `key[]` instead.

---

## How to Use This Documentation

- Browse the **modules** under `tagquery.lib` to explore available APIs.
- Private helpers (`_method`, `_Class`) are minimally documented.
"""

from importlib.metadata import version

from tagquery.lib.encoder import Encoder, MaxDepthError, UnsupportedKindError, encode, value_string, values
from tagquery.lib.tags import TagOptions, parse_tag, query_field
from tagquery.lib.url import append_query, encode_query
from tagquery.lib.values import MalformedQueryError, QueryError, Values, parse_query

__version__ = version("tagquery")

__all__ = [
    "Encoder",
    "MalformedQueryError",
    "MaxDepthError",
    "QueryError",
    "TagOptions",
    "UnsupportedKindError",
    "Values",
    "append_query",
    "encode",
    "encode_query",
    "parse_query",
    "parse_tag",
    "query_field",
    "value_string",
    "values",
]
