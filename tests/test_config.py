"""Tests for declarative route configuration."""

from __future__ import annotations

import re
from pathlib import Path

import pytest
from pydantic import ValidationError

from antroute import PatternCompilationError, Router
from antroute.config import ConstraintDeclaration, RouteDeclaration, UrlMappingSettings, load_settings


class TestRouteDeclaration:
    def test_to_mapping(self) -> None:
        declaration = RouteDeclaration(
            pattern="/book/(*)",
            controller="book",
            action="show",
            constraints={"id": ConstraintDeclaration(type="int")},
        )
        mapping = declaration.to_mapping()
        assert mapping.match("/book/42").params == {"id": "42"}
        assert mapping.match("/book/abc") is None

    def test_constraint_order_follows_declaration(self) -> None:
        declaration = RouteDeclaration.model_validate(
            {"pattern": "/(*)/(*)", "constraints": {"year": {"type": "int"}, "slug": {"pattern": "[a-z]+"}}}
        )
        assert declaration.to_mapping().match("/2024/intro").params == {"year": "2024", "slug": "intro"}

    def test_choices(self) -> None:
        declaration = RouteDeclaration.model_validate(
            {"pattern": "/feed/(*)", "constraints": {"format": {"choices": ["rss", "atom"]}}}
        )
        mapping = declaration.to_mapping()
        assert mapping.match("/feed/atom") is not None
        assert mapping.match("/feed/json") is None

    @pytest.mark.parametrize(
        ("declared", "complaint"),
        [
            ({"type": "str", "ge": 5}, "ge only apply to int or float"),
            ({"type": "int", "pattern": "[0-9]+"}, "pattern only apply to str"),
            ({"type": "int", "min_length": 2}, "min_length only apply to str"),
        ],
    )
    def test_limits_must_fit_type(self, declared: dict, complaint: str) -> None:
        with pytest.raises(ValidationError, match=re.escape(f"Constraint [x]: {complaint}")):
            RouteDeclaration.model_validate({"pattern": "/p/(*)", "constraints": {"x": declared}})

    def test_choices_converted_to_declared_type(self) -> None:
        declaration = RouteDeclaration.model_validate(
            {"pattern": "/p/(*)", "constraints": {"n": {"type": "int", "choices": ["1", "2"]}}}
        )
        mapping = declaration.to_mapping()
        assert mapping.match("/p/1").params == {"n": "1"}
        assert mapping.match("/p/3") is None

    def test_choices_that_do_not_convert_are_rejected(self) -> None:
        with pytest.raises(ValidationError, match="choices must all be int values"):
            ConstraintDeclaration.model_validate({"type": "int", "choices": ["one"]})

    def test_pattern_must_start_with_slash(self) -> None:
        with pytest.raises(ValidationError, match="must start with '/'"):
            RouteDeclaration(pattern="book")

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RouteDeclaration.model_validate({"pattern": "/book", "method": "GET"})

    def test_unknown_constraint_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ConstraintDeclaration.model_validate({"type": "uuid"})

    def test_missing_constraint_fails_at_compile(self) -> None:
        declaration = RouteDeclaration(pattern="/book/(*)")
        with pytest.raises(PatternCompilationError):
            declaration.to_mapping()


class TestSettings:
    def test_defaults(self) -> None:
        settings = UrlMappingSettings()
        assert settings.encoding == "utf-8"
        assert settings.routes == []

    def test_encoding_normalised(self) -> None:
        assert UrlMappingSettings(encoding="latin-1").encoding == "iso8859-1"

    def test_unknown_encoding(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported character encoding"):
            UrlMappingSettings(encoding="no-such-codec")

    def test_non_text_codec_rejected(self) -> None:
        with pytest.raises(ValidationError, match="rot13"):
            UrlMappingSettings(encoding="rot13")

    def test_load_settings(self, routes_file: Path) -> None:
        settings = load_settings(routes_file)
        assert len(settings.routes) == 4
        assert settings.routes[1].constraints["id"].type == "int"

    def test_router_from_settings(self, routes_file: Path) -> None:
        router = Router.from_settings(load_settings(routes_file))
        assert [m.pattern for m in router] == ["/book", "/about", "/book/(*)", "/(*)/(*)?/(*)?"]
        result = router.match("/about")
        assert result.view_name == "about"
        assert result.params == {"lang": "en"}
