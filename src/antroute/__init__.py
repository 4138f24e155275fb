"""Ant-style URL mapping: compile patterns, match paths, build URLs back."""

__version__ = "0.1.0"

from antroute.errors import (
    MissingRouteParameterError,
    PatternCompilationError,
    UnsupportedEncodingError,
    UrlMappingError,
)
from antroute.mapping import Deferred, Fixed, MatchResult, UrlMapping
from antroute.precedence import compare_mappings, precedence_key
from antroute.routing import Router
from antroute.validation import Constraint

__all__ = [
    "Constraint",
    "Deferred",
    "Fixed",
    "MatchResult",
    "MissingRouteParameterError",
    "PatternCompilationError",
    "Router",
    "UnsupportedEncodingError",
    "UrlMapping",
    "UrlMappingError",
    "compare_mappings",
    "precedence_key",
]
