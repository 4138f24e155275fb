"""Declarative route configuration.

Routes can be declared in JSON and validated with pydantic before any
pattern is compiled::

    {
      "encoding": "utf-8",
      "routes": [
        {"pattern": "/blog/(*)/(**)", "controller": "blog", "action": "show",
         "constraints": {"blogId": {"type": "int"}, "rest": {}}}
      ]
    }

Constraint order in the JSON object is placeholder order in the pattern.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

from antroute.encoding import DEFAULT_ENCODING, check_encoding
from antroute.errors import UnsupportedEncodingError
from antroute.mapping import UrlMapping
from antroute.validation import Constraint, check_limits

_TYPES: dict[str, type] = {"str": str, "int": int, "float": float}


class ConstraintDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["str", "int", "float"] = "str"
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    ge: int | float | None = None
    le: int | float | None = None
    choices: list[str | int | float] | None = None

    @model_validator(mode="after")
    def _choices_fit_type(self) -> ConstraintDeclaration:
        self.typed_choices()
        return self

    def typed_choices(self) -> list[Any] | None:
        """Choices converted to the declared type, so ``"1"`` matches an int capture."""
        if self.choices is None:
            return None
        if self.type == "str":
            return [str(choice) for choice in self.choices]
        adapter: TypeAdapter[Any] = TypeAdapter(_TYPES[self.type])
        try:
            return [adapter.validate_python(choice) for choice in self.choices]
        except ValidationError as exc:
            msg = f"choices must all be {self.type} values"
            raise ValueError(msg) from exc

    def to_constraint(self, name: str) -> Constraint:
        return Constraint(
            name,
            _TYPES[self.type],
            pattern=self.pattern,
            min_length=self.min_length,
            max_length=self.max_length,
            ge=self.ge,
            le=self.le,
            choices=self.typed_choices(),
        )


class RouteDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str
    controller: str | None = None
    action: str | None = None
    view: str | None = None
    constraints: dict[str, ConstraintDeclaration] = Field(default_factory=dict)
    parameters: dict[str, str] = Field(default_factory=dict)
    parse_request: bool = False

    @field_validator("pattern")
    @classmethod
    def _starts_with_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            msg = "pattern must start with '/'"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _limits_fit_types(self) -> RouteDeclaration:
        for name, declared in self.constraints.items():
            limits = declared.model_dump(include={"pattern", "min_length", "max_length", "ge", "le"})
            check_limits(name, _TYPES[declared.type], limits)
        return self

    def to_mapping(self) -> UrlMapping:
        """Compile this declaration; bad patterns raise ``PatternCompilationError``."""
        return UrlMapping(
            self.pattern,
            self.controller,
            self.action,
            self.view,
            constraints=[declared.to_constraint(name) for name, declared in self.constraints.items()],
            parameters=self.parameters,
            parse_request=self.parse_request,
        )


class UrlMappingSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    encoding: str = DEFAULT_ENCODING
    routes: list[RouteDeclaration] = Field(default_factory=list)

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            return check_encoding(value)
        except UnsupportedEncodingError as exc:
            raise ValueError(str(exc)) from exc


def load_settings(path: str | Path) -> UrlMappingSettings:
    """Read and validate a JSON route file."""
    return UrlMappingSettings.model_validate_json(Path(path).read_text(encoding="utf-8"))
