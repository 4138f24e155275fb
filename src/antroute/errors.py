"""antroute exception hierarchy.

Configuration-time failures (bad patterns, bad declarations) and
reverse-build failures share one base so callers can catch them together.
Matching never raises for an ordinary miss; it returns ``None``.
"""

from __future__ import annotations


class UrlMappingError(Exception):
    """Base for all antroute errors."""


class PatternCompilationError(UrlMappingError):
    """Raised when a URL pattern cannot be turned into a matcher.

    Always names the offending pattern so startup failures can be traced
    back to the declaration.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Error evaluating mapping for pattern [{pattern}]: {reason}")


class MissingRouteParameterError(UrlMappingError):
    """A required placeholder had no value while building a URL."""

    def __init__(self, name: str, pattern: str) -> None:
        self.name = name
        self.pattern = pattern
        super().__init__(
            f"Unable to create URL for mapping [{pattern}]. "
            f"Parameter [{name}] is required, but was not specified!"
        )


class UnsupportedEncodingError(UrlMappingError):
    """The requested character encoding is unknown."""

    def __init__(self, encoding: str) -> None:
        self.encoding = encoding
        super().__init__(f"Unsupported character encoding: {encoding!r}")
