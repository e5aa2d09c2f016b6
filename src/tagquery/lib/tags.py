"""
Field annotations for tagquery.

A field annotation is a compact string stored in a dataclass field's
metadata under the tag key (``"query"`` by default)::

    @dataclass
    class Search:
        # Field is ignored.
        secret: str = query_field("-", default="")

        # Field appears as "q" and is omitted when empty.
        text: str = query_field("q,omitempty", default="")

        # Field appears as "ids", joined with commas.
        ids: list[int] = query_field("ids,del:comma", default_factory=list)

        # Field appears under its own name, formatted with a strftime layout.
        since: datetime = query_field(",time_format:%Y-%m-%d %H:%M", default=datetime.min)

The first comma-separated segment is the key name (empty means the field's
own name). Every following non-empty segment is an option; an option's
argument follows the first ``:`` and may itself contain ``:``.
"""

import dataclasses
import functools
from typing import Any

SKIP = "-"

OMITEMPTY = "omitempty"
INT = "int"
UNIX = "unix"
UNIXMILLI = "unixmilli"
UNIXNANO = "unixnano"
INLINE = "inline"
DEL = "del"
TIME_FORMAT = "time_format"

# Independent metadata entries, consulted when the tag has no such option.
LAYOUT_KEY = "layout"
DEL_KEY = "del"


class TagOptions(dict):
    """Options following the name in a field annotation, keyed by option name."""

    def contains(self, option: str) -> bool:
        return option in self

    def get(self, option: str, default: str = "") -> str:
        return super().get(option, default)


def parse_tag(tag: str) -> tuple[str, TagOptions]:
    """
    Split a field annotation into its name and options.

    Args:
        tag (str): The raw annotation, e.g. ``"create_time,omitempty,unix"``.

    Returns:
        tuple[str, TagOptions]: The (possibly empty) name and its options.
    """

    name, *segments = tag.split(",")
    opts = TagOptions()

    for segment in segments:
        if segment == "":
            continue

        key, *args = segment.split(":")
        opts[key] = ":".join(args)

    return name, opts


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    """How a single dataclass field is encoded."""

    attr: str
    name: str
    explicit: bool
    opts: TagOptions


def query_field(
    tag: str = "",
    *,
    layout: str | None = None,
    delimiter: str | None = None,
    key: str = "query",
    **kwargs: Any,
) -> Any:
    """
    Declare a dataclass field carrying a query annotation.

    Args:
        tag (str): The field annotation.
        layout (str, optional): strftime layout for datetime values.
        delimiter (str, optional): Sequence delimiter (``comma``, ``space``,
            ``semicolon``, ``brackets`` or a literal token).
        key (str): Metadata key the annotation is stored under.
        **kwargs: Passed through to `dataclasses.field`.
    """

    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[key] = tag
    if layout is not None:
        metadata[LAYOUT_KEY] = layout
    if delimiter is not None:
        metadata[DEL_KEY] = delimiter

    return dataclasses.field(metadata=metadata, **kwargs)


@functools.lru_cache(maxsize=None)
def field_specs(cls: type, tag_key: str = "query") -> tuple[FieldSpec, ...]:
    """
    Build the encoding descriptors for a dataclass type.

    Private fields (leading underscore) are left out unless their annotation
    asks for ``inline``, mirroring how embedded records are still walked.
    """

    specs = []
    for f in dataclasses.fields(cls):
        tag = f.metadata.get(tag_key, "")
        name, opts = parse_tag(tag)

        if name == SKIP:
            continue

        if f.name.startswith("_") and not opts.contains(INLINE):
            continue

        if not opts.contains(TIME_FORMAT) and f.metadata.get(LAYOUT_KEY):
            opts[TIME_FORMAT] = f.metadata[LAYOUT_KEY]
        if not opts.contains(DEL) and f.metadata.get(DEL_KEY):
            opts[DEL] = f.metadata[DEL_KEY]

        specs.append(FieldSpec(f.name, name or f.name, name != "", opts))

    return tuple(specs)
