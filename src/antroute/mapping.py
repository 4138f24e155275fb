"""URL mappings: match request paths and build URLs back from parameters.

A :class:`UrlMapping` takes a Grails/Ant-style pattern such as
``/blog/(*)/(**)`` and turns it into regex matchers, so URLs can be matched
and captured values bound to named constraints::

    mapping = UrlMapping(
        "/blog/(*)/(**)",
        controller="blog",
        action="show",
        constraints=[Constraint("blogId", int), Constraint("rest")],
    )
    mapping.match("/blog/5/2024/intro").params
    # {"blogId": "5", "rest": "2024/intro"}
    mapping.create_relative_url({"blogId": 5, "rest": "2024/intro"})
    # "/blog/5/2024/intro"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from antroute import context
from antroute.encoding import check_encoding, url_encode
from antroute.errors import MissingRouteParameterError, PatternCompilationError
from antroute.patterns import (
    CAPTURED_DOUBLE_WILDCARD,
    PLACEHOLDER_RE,
    SLASH,
    UrlPattern,
    compile_pattern,
    parse_pattern,
)
from antroute.validation import Constraint, ConstraintBinding, bind_constraints

logger = logging.getLogger("antroute.mapping")

CONTROLLER = "controller"
ACTION = "action"
VIEW = "view"

ParamsAccessor = Callable[[], Mapping[str, Any]]


# ------------------------------------------------------------------
# Late-bound controller / action / view names
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Fixed:
    """A name known when the mapping is declared."""

    value: str

    def resolve(self, accessor: ParamsAccessor) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Deferred:
    """A name read from the current request parameters when asked for."""

    name: str

    def resolve(self, accessor: ParamsAccessor) -> Any:
        return accessor().get(self.name)


Identifier = Fixed | Deferred


def _identifier(value: str | Identifier | None, name: str, bindings: Iterable[ConstraintBinding]) -> Identifier | None:
    if isinstance(value, Fixed | Deferred):
        return value
    if value is not None:
        return Fixed(value)
    if any(binding.name == name for binding in bindings):
        return Deferred(name)
    return None


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of a successful :meth:`UrlMapping.match`."""

    params: dict[str, str]
    mapping: UrlMapping
    controller: Identifier | None = None
    action: Identifier | None = None
    view: Identifier | None = None
    parse_request: bool = False

    def _resolve(self, identifier: Identifier | None) -> Any:
        if identifier is None:
            return None
        return identifier.resolve(self.mapping.params_accessor)

    @property
    def controller_name(self) -> Any:
        return self._resolve(self.controller)

    @property
    def action_name(self) -> Any:
        return self._resolve(self.action)

    @property
    def view_name(self) -> Any:
        return self._resolve(self.view)


# ------------------------------------------------------------------
# Mapping
# ------------------------------------------------------------------


class UrlMapping:
    """A compiled URL pattern bound to a controller, action or view.

    Parameters
    ----------
    pattern:
        Pattern text (``/blog/(*)/(**)``) or an already parsed
        :class:`UrlPattern`.
    controller, action, view:
        Target names. When omitted and a constraint of the same name
        exists, the name is taken from the request parameters at the
        time it is read.
    constraints:
        One :class:`Constraint` per captured placeholder, in order.
        Extra constraints are allowed and are nullable.
    parameters:
        Fixed values merged into every match, overriding captures.
    params_accessor:
        Returns the current request parameters; defaults to
        :func:`antroute.context.current_params`.
    """

    __slots__ = (
        "_bindings",
        "_parameters",
        "_regexes",
        "_url_pattern",
        "action",
        "controller",
        "params_accessor",
        "parse_request",
        "view",
    )

    def __init__(
        self,
        pattern: str | UrlPattern,
        controller: str | Identifier | None = None,
        action: str | Identifier | None = None,
        view: str | Identifier | None = None,
        *,
        constraints: Iterable[Constraint] = (),
        parameters: Mapping[str, Any] | None = None,
        parse_request: bool = False,
        params_accessor: ParamsAccessor = context.current_params,
    ) -> None:
        url_pattern = pattern if isinstance(pattern, UrlPattern) else parse_pattern(pattern)
        constraints = tuple(constraints)

        regexes = tuple(compile_pattern(url, url_pattern.pattern) for url in url_pattern.logical_urls)
        groups = max(regex.groups for regex in regexes)
        if groups > len(constraints):
            raise PatternCompilationError(
                url_pattern.pattern,
                f"{groups} capturing groups but only {len(constraints)} constraints",
            )

        self._url_pattern = url_pattern
        self._regexes: tuple[re.Pattern[str], ...] = regexes
        self._bindings = bind_constraints(url_pattern.pattern, constraints)
        self._parameters: Mapping[str, Any] = MappingProxyType(dict(parameters or {}))
        self.controller = _identifier(controller, CONTROLLER, self._bindings)
        self.action = _identifier(action, ACTION, self._bindings)
        self.view = _identifier(view, VIEW, self._bindings)
        self.parse_request = parse_request
        self.params_accessor = params_accessor

    @property
    def pattern(self) -> str:
        return self._url_pattern.pattern

    @property
    def url_pattern(self) -> UrlPattern:
        return self._url_pattern

    @property
    def tokens(self) -> tuple[str, ...]:
        return self._url_pattern.tokens

    @property
    def logical_urls(self) -> tuple[str, ...]:
        return self._url_pattern.logical_urls

    @property
    def constraints(self) -> tuple[ConstraintBinding, ...]:
        return self._bindings

    @property
    def parameters(self) -> Mapping[str, Any]:
        return self._parameters

    def __str__(self) -> str:
        return self.pattern

    def __repr__(self) -> str:
        return f"UrlMapping({self.pattern!r}, controller={self.controller!r}, action={self.action!r})"

    # --------------------------------------------------------------
    # Matching
    # --------------------------------------------------------------

    def match(self, uri: str) -> MatchResult | None:
        """Match *uri* against each logical URL in turn.

        Returns ``None`` when nothing matches or when a captured value
        fails its constraint.
        """
        for regex in self._regexes:
            m = regex.fullmatch(uri)
            if m is None:
                continue
            params = self._extract(uri, m)
            if params is not None:
                return MatchResult(
                    params=params,
                    mapping=self,
                    controller=self.controller,
                    action=self.action,
                    view=self.view,
                    parse_request=self.parse_request,
                )
        return None

    def _extract(self, uri: str, m: re.Match[str]) -> dict[str, str] | None:
        params: dict[str, str] = {}
        group_count = len(m.groups())
        for index in range(group_count):
            value = m.group(index + 1)
            value = value.split("?", 1)[0]
            binding = self._bindings[index]
            errors = binding.validate(self, value)
            if errors:
                logger.debug("Rejected %r for mapping [%s]: %s", uri, self, "; ".join(errors))
                return None
            params[binding.name] = value

        if group_count:
            # Trailing segments after the last capture are read as name/value pairs.
            remaining = uri[m.end(group_count) :].removeprefix(SLASH)
            if remaining:
                tokens = remaining.split(SLASH)
                for i in range(0, len(tokens) - 1, 2):
                    params[tokens[i]] = tokens[i + 1]

        params.update(self._parameters)
        return params

    # --------------------------------------------------------------
    # Reverse URLs
    # --------------------------------------------------------------

    def create_url(
        self,
        params: Mapping[str, Any] | None = None,
        encoding: str | None = None,
        fragment: str | None = None,
    ) -> str:
        """Build a URL prefixed with the current application context path."""
        return self._create_url(params, encoding, fragment, context.context_path.get())

    def create_relative_url(
        self,
        params: Mapping[str, Any] | None = None,
        encoding: str | None = None,
        fragment: str | None = None,
    ) -> str:
        """Build a URL without the context path."""
        return self._create_url(params, encoding, fragment, "")

    def create_url_for(
        self,
        controller: str | None,
        action: str | None,
        params: Mapping[str, Any] | None = None,
        encoding: str | None = None,
        fragment: str | None = None,
        *,
        relative: bool = False,
    ) -> str:
        """Build a URL with *controller* and *action* added to *params*.

        Blank names are ignored. The caller's mapping is left untouched.
        """
        values = dict(params or {})
        if controller and controller.strip():
            values[CONTROLLER] = controller
        if action and action.strip():
            values[ACTION] = action
        prefix = "" if relative else context.context_path.get()
        return self._create_url(values, encoding, fragment, prefix)

    def _create_url(
        self,
        params: Mapping[str, Any] | None,
        encoding: str | None,
        fragment: str | None,
        prefix: str,
    ) -> str:
        encoding = check_encoding(encoding)
        params = params if params is not None else {}
        used: set[str] = set()

        parts = [prefix]
        bindings = iter(self._bindings)
        for token in self.tokens:
            if PLACEHOLDER_RE.search(token) is None:
                parts.append(SLASH + token)
                continue

            def substitute(_: re.Match[str]) -> str:
                binding = next(bindings)
                used.add(binding.name)
                value = params.get(binding.name)
                if value is None:
                    if not binding.nullable:
                        raise MissingRouteParameterError(binding.name, self.pattern)
                    return ""
                return str(value)

            value = PLACEHOLDER_RE.sub(substitute, token)
            if SLASH in value and token == CAPTURED_DOUBLE_WILDCARD:
                # Each piece of a multi-segment capture is its own path segment.
                parts.extend(SLASH + url_encode(segment, encoding) for segment in value.split(SLASH) if segment)
            elif value:
                parts.append(SLASH + url_encode(value, encoding))
            else:
                # An absent optional value ends the path.
                break

        uri = "".join(parts) or SLASH
        uri += _query_string(params, used, encoding)
        if fragment is not None:
            uri += "#" + url_encode(fragment, encoding)

        logger.debug("Created reverse URL mapping [%s] for parameters [%s]", uri, params)
        return uri


def _is_multi_valued(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, str | bytes | bytearray | Mapping)


def _query_string(params: Mapping[str, Any], used: set[str], encoding: str) -> str:
    """Encode every parameter not consumed by the path."""
    used = used | {CONTROLLER, ACTION}
    pairs: list[str] = []
    for name, value in params.items():
        name = str(name)
        if name in used:
            continue
        values = value if _is_multi_valued(value) else (value,)
        encoded_name = url_encode(name, encoding)
        pairs.extend(
            f"{encoded_name}={url_encode('' if item is None else str(item), encoding)}" for item in values
        )
    if not pairs:
        return ""
    return "?" + "&".join(pairs)
