"""Tests for constraints and constraint binding."""

from __future__ import annotations

from typing import Literal

import pytest

from antroute import UrlMapping
from antroute.validation import Constraint, ConstraintBinding, bind_constraints

# -- Type conversion ------------------------------------------------------


def test_str_accepts_anything() -> None:
    assert Constraint("name").validate(None, "anything at all") == []


def test_int_accepts_digits() -> None:
    assert Constraint("id", int).validate(None, "42") == []


def test_int_rejects_text() -> None:
    errors = Constraint("id", int).validate("/book/(*)", "abc")
    assert len(errors) == 1
    assert errors[0].startswith("[/book/(*)] id:")


def test_float() -> None:
    constraint = Constraint("price", float)
    assert constraint.validate(None, "9.99") == []
    assert constraint.validate(None, "cheap") != []


# -- Limits ---------------------------------------------------------------


def test_pattern_must_match_whole_value() -> None:
    constraint = Constraint("slug", pattern="[a-z-]+")
    assert constraint.validate(None, "hello-world") == []
    assert constraint.validate(None, "Hello") != []
    assert constraint.validate(None, "abc1") != []


def test_length_limits() -> None:
    constraint = Constraint("code", min_length=2, max_length=3)
    assert constraint.validate(None, "ab") == []
    assert constraint.validate(None, "a") != []
    assert constraint.validate(None, "abcd") != []


def test_numeric_bounds() -> None:
    constraint = Constraint("page", int, ge=1, le=100)
    assert constraint.validate(None, "1") == []
    assert constraint.validate(None, "0") != []
    assert constraint.validate(None, "101") != []


def test_choices() -> None:
    constraint = Constraint("format", choices=["json", "xml"])
    assert constraint.validate(None, "xml") == []
    assert any("must be one of" in error for error in constraint.validate(None, "csv"))


def test_choices_compared_after_conversion() -> None:
    constraint = Constraint("year", int, choices=[2023, 2024])
    assert constraint.validate(None, "2024") == []
    assert constraint.validate(None, "2025") != []


def test_custom_validator() -> None:
    constraint = Constraint("user", validator=lambda value: value.startswith("u"))
    assert constraint.validate(None, "u123") == []
    assert any("failed custom validation" in error for error in constraint.validate(None, "x123"))


# -- Binding ----------------------------------------------------------------


def test_binding_per_placeholder() -> None:
    bindings = bind_constraints("/a/(*)/(*)", [Constraint("x"), Constraint("y"), Constraint("z")])
    assert [binding.name for binding in bindings] == ["x", "y", "z"]
    assert [binding.nullable for binding in bindings] == [False, False, True]


def test_optional_placeholder_is_nullable() -> None:
    (binding,) = bind_constraints("/shop/(*)?", [Constraint("category")])
    assert binding.nullable is True


def test_optional_marker_only_affects_its_placeholder() -> None:
    bindings = bind_constraints("/(*)?/(*)", [Constraint("a"), Constraint("b")])
    assert [binding.nullable for binding in bindings] == [True, False]


def test_no_placeholders_means_nullable() -> None:
    (binding,) = bind_constraints("/static", [Constraint("a")])
    assert binding.nullable is True


def test_constraints_are_not_mutated_by_binding() -> None:
    shared = Constraint("id")
    (required,) = bind_constraints("/a/(*)", [shared])
    (optional,) = bind_constraints("/a/(*)?", [shared])
    assert required.nullable is False
    assert optional.nullable is True
    assert required.constraint is optional.constraint


@pytest.mark.parametrize(("nullable", "expected"), [(True, []), (False, ["[m] id: value is required"])])
def test_binding_none_value(nullable: bool, expected: list[str]) -> None:
    binding = ConstraintBinding(constraint=Constraint("id"), nullable=nullable)
    assert binding.validate("m", None) == expected


# -- Limits that do not fit the type ------------------------------------------


@pytest.mark.parametrize(
    ("type_", "limits"),
    [
        (str, {"ge": 5}),
        (str, {"le": 5}),
        (int, {"pattern": "[0-9]+"}),
        (int, {"min_length": 2}),
        (float, {"max_length": 4}),
    ],
)
def test_limits_rejected_when_type_cannot_take_them(type_: type, limits: dict) -> None:
    with pytest.raises(ValueError, match=r"Constraint \[x\]"):
        Constraint("x", type_, **limits)


def test_matching_with_fitting_limits_never_raises() -> None:
    mapping = UrlMapping("/p/(*)", constraints=[Constraint("x", int, ge=5)])
    assert mapping.match("/p/abc") is None
    assert mapping.match("/p/4") is None
    assert mapping.match("/p/5").params == {"x": "5"}


def test_repr_with_typing_construct() -> None:
    constraint = Constraint("mode", Literal["a", "b"])
    assert repr(constraint).startswith("Constraint('mode', ")
    assert constraint.validate(None, "a") == []
    assert constraint.validate(None, "c") != []
