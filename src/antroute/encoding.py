"""Percent-encoding for generated URLs."""

from __future__ import annotations

import codecs
from urllib.parse import quote_plus

from antroute.errors import UnsupportedEncodingError

DEFAULT_ENCODING = "utf-8"


def check_encoding(encoding: str | None) -> str:
    """Return the canonical codec name for *encoding*.

    ``None`` means the default. Unknown names, and codecs that are not
    text encodings such as ``rot13``, raise
    :class:`UnsupportedEncodingError` straight away.
    """
    if encoding is None:
        return DEFAULT_ENCODING
    try:
        name = codecs.lookup(encoding).name
        "".encode(name)
    except LookupError as exc:
        raise UnsupportedEncodingError(encoding) from exc
    return name


def url_encode(text: str, encoding: str = DEFAULT_ENCODING) -> str:
    """Form-encode *text*: spaces become ``+``, ``*`` is left alone."""
    try:
        return quote_plus(text, safe="*", encoding=encoding)
    except LookupError as exc:
        raise UnsupportedEncodingError(encoding) from exc
