"""Ant-style URL patterns and their translation to regular expressions.

A pattern such as ``/blog/(*)/(**)`` is split into path tokens once and
compiled into one regex per *logical URL*. Optional placeholders written as
``(*)?`` produce extra, shorter logical URLs so ``/shop/(*)?`` matches both
``/shop/books`` and ``/shop``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from antroute.errors import PatternCompilationError

logger = logging.getLogger("antroute.patterns")

SLASH = "/"
WILDCARD = "*"
DOUBLE_WILDCARD = "**"
CAPTURED_WILDCARD = "(*)"
CAPTURED_DOUBLE_WILDCARD = "(**)"
OPTIONAL_MARKER = "?"

# Finds either captured form, ``(*)`` or ``(**)``, inside a token.
PLACEHOLDER_RE = re.compile(r"\(\*\*?\)")

_SINGLE_FLANKED_RE = re.compile(r"([^*])\*([^*])")
_SINGLE_TRAILING_RE = re.compile(r"([^*])\*$")
_DOUBLE_RE = re.compile(r"\*\*")

_SEGMENT = "[^/]+"
_ANY = ".*"


@dataclass(frozen=True, slots=True)
class UrlPattern:
    """A parsed URL pattern.

    ``tokens`` are the non-empty path segments with optional markers
    stripped. ``logical_urls`` lists every URL variant the pattern
    stands for, the complete one first.
    """

    pattern: str
    tokens: tuple[str, ...]
    logical_urls: tuple[str, ...]

    def __str__(self) -> str:
        return self.pattern


def is_single_wildcard(token: str) -> bool:
    return token in (WILDCARD, CAPTURED_WILDCARD)


def is_double_wildcard(token: str) -> bool:
    return token in (DOUBLE_WILDCARD, CAPTURED_DOUBLE_WILDCARD)


def _is_optional(segment: str) -> bool:
    return segment.endswith(OPTIONAL_MARKER) and PLACEHOLDER_RE.search(segment[:-1]) is not None


def parse_pattern(pattern: str) -> UrlPattern:
    """Split *pattern* into tokens and logical URL variants.

    Examples::

        "/books"        -> tokens ("books",),           urls ("/books",)
        "/shop/(*)?"    -> tokens ("shop", "(*)"),      urls ("/shop/(*)", "/shop")
        "/(*)?/(*)?"    -> tokens ("(*)", "(*)"),       urls ("/(*)/(*)", "/(*)", "/")
    """
    if not pattern.startswith(SLASH):
        raise PatternCompilationError(pattern, "URL patterns must start with '/'")

    tokens: list[str] = []
    truncated: list[str] = []
    for segment in pattern.split(SLASH):
        if not segment:
            continue
        if _is_optional(segment):
            truncated.append(_join(tokens))
            segment = segment[:-1]
        tokens.append(segment)

    logical_urls = (_join(tokens), *reversed(truncated))
    return UrlPattern(pattern=pattern, tokens=tuple(tokens), logical_urls=logical_urls)


def _join(tokens: list[str]) -> str:
    return SLASH + SLASH.join(tokens)


# ------------------------------------------------------------------
# Translation pipeline
# ------------------------------------------------------------------
#
# The stages must run in this order: single wildcards are rewritten before
# any remaining "**" run is collapsed, otherwise "**" would be eaten by the
# single-wildcard rules.


def _escape_literals(url: str) -> str:
    return url.replace(".", r"\.").replace("+", r"\+")


def _substitute_single_wildcards(expr: str) -> str:
    expr = _SINGLE_FLANKED_RE.sub(lambda m: m.group(1) + _SEGMENT + m.group(2), expr)
    return _SINGLE_TRAILING_RE.sub(lambda m: m.group(1) + _SEGMENT, expr)


def _substitute_double_wildcards(expr: str) -> str:
    return _DOUBLE_RE.sub(_ANY, expr)


def _anchor(expr: str) -> str:
    return "^" + expr + "/??$"


_PIPELINE = (
    _escape_literals,
    _substitute_single_wildcards,
    _substitute_double_wildcards,
    _anchor,
)


def translate(url: str) -> str:
    """Return the regex source for one logical URL."""
    expr = url
    for stage in _PIPELINE:
        expr = stage(expr)
    return expr


def compile_pattern(url: str, pattern: str | None = None) -> re.Pattern[str]:
    """Compile one logical URL into a matcher.

    *pattern* is the declared pattern the URL came from; it is only used
    to make the error message point at the declaration.
    """
    source = translate(url)
    try:
        regex = re.compile(source)
    except re.error as exc:
        raise PatternCompilationError(pattern or url, f"{source!r}: {exc}") from exc
    logger.debug("Compiled %s to %s", url, source)
    return regex
