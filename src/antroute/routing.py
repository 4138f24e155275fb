"""Route table ordered by mapping precedence."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from antroute.encoding import check_encoding
from antroute.errors import UrlMappingError
from antroute.mapping import ACTION, CONTROLLER, Deferred, Fixed, Identifier, MatchResult, UrlMapping
from antroute.precedence import precedence_key

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from antroute.config import UrlMappingSettings

logger = logging.getLogger("antroute.routing")


class Router:
    """Collection of URL mappings with highest-precedence-wins lookup.

    Mappings are kept sorted as they are added, so lookups never reorder
    shared state. Mappings of equal precedence keep registration order.
    """

    __slots__ = ("_mappings", "encoding")

    def __init__(self, *, encoding: str | None = None) -> None:
        self.encoding = check_encoding(encoding)
        self._mappings: tuple[UrlMapping, ...] = ()

    @classmethod
    def from_settings(cls, settings: UrlMappingSettings) -> Router:
        router = cls(encoding=settings.encoding)
        for declaration in settings.routes:
            router.add(declaration.to_mapping())
        return router

    @property
    def mappings(self) -> tuple[UrlMapping, ...]:
        return self._mappings

    def __iter__(self) -> Iterator[UrlMapping]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def add(self, mapping: UrlMapping) -> UrlMapping:
        self._mappings = tuple(sorted((*self._mappings, mapping), key=precedence_key, reverse=True))
        logger.debug("Registered mapping [%s]", mapping)
        return mapping

    def add_route(
        self,
        pattern: str,
        controller: str | None = None,
        action: str | None = None,
        view: str | None = None,
        **kwargs: Any,
    ) -> UrlMapping:
        return self.add(UrlMapping(pattern, controller, action, view, **kwargs))

    def match(self, uri: str) -> MatchResult | None:
        """Return the first match in precedence order, or ``None``."""
        for mapping in self._mappings:
            result = mapping.match(uri)
            if result is not None:
                return result
        return None

    def match_all(self, uri: str) -> list[MatchResult]:
        """Return every match, highest precedence first."""
        return [result for mapping in self._mappings if (result := mapping.match(uri)) is not None]

    def reverse(
        self,
        controller: str | None = None,
        action: str | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> UrlMapping | None:
        """Find the mapping that can produce a URL for the given target."""
        params = params or {}
        for mapping in self._mappings:
            if not (_accepts(mapping.controller, controller) and _accepts(mapping.action, action)):
                continue
            missing = [
                binding.name
                for binding in mapping.constraints
                if not binding.nullable
                and binding.name not in (CONTROLLER, ACTION)
                and params.get(binding.name) is None
            ]
            if not missing:
                return mapping
        return None

    def create_url(
        self,
        controller: str | None = None,
        action: str | None = None,
        params: Mapping[str, Any] | None = None,
        fragment: str | None = None,
        *,
        relative: bool = False,
    ) -> str:
        mapping = self.reverse(controller, action, params)
        if mapping is None:
            msg = f"No mapping found for controller={controller!r} action={action!r} params={dict(params or {})!r}"
            raise UrlMappingError(msg)
        return mapping.create_url_for(controller, action, params, self.encoding, fragment, relative=relative)


def _accepts(identifier: Identifier | None, name: str | None) -> bool:
    if name is None:
        return True
    if isinstance(identifier, Fixed):
        return identifier.value == name
    return isinstance(identifier, Deferred)
