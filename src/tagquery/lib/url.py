"""
URL helpers built on the query encoder.

These are the pieces an HTTP client needs to turn a caller-supplied query
value into a request URL: joining an endpoint with a path and appending an
encoded query to whatever query the URL already carries.
"""

from typing import Any
from urllib.parse import urlsplit, urlunsplit

from tagquery.lib.encoder import BYTES_TYPES, encode, value_string


def encode_query(value: Any) -> str:
    """
    Encode value as a query string without a leading ``?``.

    Non-empty strings and bytes are taken as already encoded and passed
    through; every other value goes through the encoder.

    Args:
        value: Query value of any supported shape, or None.

    Returns:
        str: The encoded query, sorted by key when it was built here.
    """

    if value is None:
        return ""

    if isinstance(value, (str, *BYTES_TYPES)):
        query = value_string(value)
        if query:
            return query.lstrip("?")

    return encode(value)


def append_query(url: str, value: Any) -> str:
    """
    Append an encoded query to url, joining with ``&`` if it has one already.

    Args:
        url (str): The request URL.
        value: Query value of any supported shape.

    Returns:
        str: The URL with the query appended; unchanged if the query is empty.
    """

    query = encode_query(value)
    if not query:
        return url

    parts = urlsplit(url)
    merged = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit(parts._replace(query=merged))


def full_path(endpoint: str, path: str) -> str:
    """
    Join endpoint and path with exactly one ``/``.

    Absolute http(s) paths and paths already under endpoint are returned as is.
    """

    if not endpoint:
        return path

    if path.startswith(("http://", "https://")) or path.startswith(endpoint):
        return path

    return f"{endpoint.rstrip('/')}/{path.lstrip('/')}"


def force_https(endpoint: str) -> str:
    """Replace the scheme of endpoint (if any) with https."""

    _, sep, rest = endpoint.partition("://")
    return f"https://{rest if sep else endpoint}"
