"""
Codec registry for request and response bodies.

Codecs are registered process-wide by name, and content types are mapped to
codec names through their subtype (``application/json; charset=utf-8`` maps
through ``json``). Built-in entries are installed at import; `register_codec`
and `register_codec_by_content_type` are the only ways to change them.
"""

import json
import threading
import xml.etree.ElementTree as ET
from typing import Any

import yaml

from tagquery.lib.logger import Logger


class Codec:
    """Marshal objects to bytes and back. Implementations must be thread safe."""

    name = ""

    def marshal(self, obj: Any) -> bytes:
        raise NotImplementedError

    def unmarshal(self, data: bytes) -> Any:
        raise NotImplementedError


class JSONCodec(Codec):
    name = "json"

    def marshal(self, obj: Any) -> bytes:
        return json.dumps(obj, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def unmarshal(self, data: bytes) -> Any:
        return json.loads(data)


class YAMLCodec(Codec):
    name = "yaml"

    def marshal(self, obj: Any) -> bytes:
        return yaml.safe_dump(obj, allow_unicode=True, sort_keys=False).encode("utf-8")

    def unmarshal(self, data: bytes) -> Any:
        return yaml.safe_load(data)


class XMLCodec(Codec):
    """Marshal `ElementTree` elements. Unmarshal returns the root element."""

    name = "xml"

    def marshal(self, obj: Any) -> bytes:
        if not isinstance(obj, ET.Element):
            raise TypeError(f"xml codec expects an Element. Got {type(obj).__name__}")
        return ET.tostring(obj, encoding="unicode").encode("utf-8")

    def unmarshal(self, data: bytes) -> ET.Element:
        return ET.fromstring(data)


_lock = threading.RLock()
_codecs: dict[str, Codec] = {}
_subtypes: dict[str, str] = {}


def content_subtype(content_type: str) -> str:
    """
    Return the subtype of a content type, e.g. ``json`` for
    ``application/json; charset=utf-8``, or "" if there is none.
    """

    left = content_type.find("/")
    if left == -1:
        return ""

    right = content_type.find(";")
    if right == -1:
        right = len(content_type)
    if right < left:
        return ""

    return content_type[left + 1 : right].strip()


def register_codec(codec: Codec) -> None:
    """
    Register codec under its name, replacing any codec of the same name.

    Raises:
        ValueError: If codec is None or has an empty name.
    """

    if codec is None:
        raise ValueError("cannot register a nil Codec")
    if not codec.name:
        raise ValueError("cannot register Codec with empty name")

    with _lock:
        _codecs[codec.name] = codec

    Logger.debug(f"Registered codec '{codec.name}'.")


def get_codec(name: str) -> Codec | None:
    with _lock:
        return _codecs.get(name)


def register_codec_name_by_content_type(content_type: str, name: str) -> None:
    """Map the subtype of content_type to an already registered codec name."""

    if not name:
        return

    with _lock:
        _subtypes[content_subtype(content_type)] = name


def register_codec_by_content_type(content_type: str, codec: Codec) -> None:
    """Register codec and map the subtype of content_type to it."""

    if codec is None:
        return

    with _lock:
        register_codec(codec)
        _subtypes[content_subtype(content_type)] = codec.name


def get_codec_by_content_type(content_type: str) -> Codec | None:
    """Return the codec mapped to the subtype of content_type, if any."""

    with _lock:
        name = _subtypes.get(content_subtype(content_type))
        return _codecs.get(name) if name else None


def _init_builtins() -> None:
    register_codec(JSONCodec())
    register_codec(YAMLCodec())
    register_codec(XMLCodec())

    with _lock:
        _subtypes.update(
            {
                # default: json
                "*": JSONCodec.name,
                "json": JSONCodec.name,
                "x-yaml": YAMLCodec.name,
                "yaml": YAMLCodec.name,
                "xml": XMLCodec.name,
            }
        )


_init_builtins()
