"""Named constraints on captured URL values and their binding to patterns."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import AfterValidator, Field, TypeAdapter, ValidationError

from antroute.patterns import CAPTURED_WILDCARD, OPTIONAL_MARKER


def _anchored(pattern: str) -> str:
    if pattern.startswith("^") and pattern.endswith("$"):
        return pattern
    return f"^(?:{pattern})$"


def _one_of(choices: tuple[Any, ...]) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if value not in choices:
            msg = f"must be one of {list(choices)!r}"
            raise ValueError(msg)
        return value

    return check


def _satisfies(predicate: Callable[[Any], bool]) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if not predicate(value):
            msg = "failed custom validation"
            raise ValueError(msg)
        return value

    return check


def _is_subclass(type_: Any, bases: tuple[type, ...]) -> bool:
    return isinstance(type_, type) and issubclass(type_, bases)


def check_limits(name: str, type_: Any, limits: dict[str, Any]) -> None:
    """Reject limits that cannot apply to *type_*.

    Text limits need a ``str`` type and numeric bounds an ``int`` or
    ``float`` type.
    """
    text = sorted(key for key in ("pattern", "min_length", "max_length") if limits.get(key) is not None)
    if text and not _is_subclass(type_, (str,)):
        msg = f"Constraint [{name}]: {', '.join(text)} only apply to str values"
        raise ValueError(msg)
    numeric = sorted(key for key in ("ge", "le") if limits.get(key) is not None)
    if numeric and not _is_subclass(type_, (int, float)):
        msg = f"Constraint [{name}]: {', '.join(numeric)} only apply to int or float values"
        raise ValueError(msg)


class Constraint:
    """A named validation rule for one captured URL value.

    Validation is delegated to a pydantic :class:`TypeAdapter` built once
    from the options, so ``Constraint("id", int, ge=1)`` accepts ``"42"``
    and rejects ``"abc"`` or ``"0"``. The captured string itself is what
    ends up in the match result; conversion only decides acceptance.

    Parameters
    ----------
    name:
        Property name the captured value is stored under.
    type_:
        Target type the value must convert to (``str``, ``int``, ``float``...).
    pattern:
        Regular expression the whole value must match.
    choices:
        Allowed values, compared after conversion.
    validator:
        Extra predicate; returning ``False`` rejects the value.

    Raises :class:`ValueError` when a limit cannot apply to *type_*, such
    as ``ge`` on ``str`` or ``pattern`` on ``int``.
    """

    __slots__ = ("_adapter", "name", "type_")

    def __init__(
        self,
        name: str,
        type_: Any = str,
        *,
        pattern: str | None = None,
        min_length: int | None = None,
        max_length: int | None = None,
        ge: float | None = None,
        le: float | None = None,
        choices: Iterable[Any] | None = None,
        validator: Callable[[Any], bool] | None = None,
    ) -> None:
        self.name = name
        self.type_ = type_

        limits = {
            "pattern": _anchored(pattern) if pattern is not None else None,
            "min_length": min_length,
            "max_length": max_length,
            "ge": ge,
            "le": le,
        }
        limits = {key: value for key, value in limits.items() if value is not None}
        check_limits(name, type_, limits)
        metadata: list[Any] = []
        if limits:
            metadata.append(Field(**limits))
        if choices is not None:
            metadata.append(AfterValidator(_one_of(tuple(choices))))
        if validator is not None:
            metadata.append(AfterValidator(_satisfies(validator)))

        target: Any = Annotated[type_, *metadata] if metadata else type_
        self._adapter: TypeAdapter[Any] = TypeAdapter(target)

    def validate(self, owner: object, value: str) -> list[str]:
        """Return the validation errors for *value*; empty means accepted.

        *owner* is the mapping doing the validation, used for messages.
        """
        try:
            self._adapter.validate_python(value)
        except ValidationError as exc:
            return [f"[{owner}] {self.name}: {error['msg']}" for error in exc.errors()]
        return []

    def __repr__(self) -> str:
        return f"Constraint({self.name!r}, {getattr(self.type_, '__name__', repr(self.type_))})"


@dataclass(frozen=True, slots=True)
class ConstraintBinding:
    """A constraint tied to one placeholder position of a pattern."""

    constraint: Constraint
    nullable: bool

    @property
    def name(self) -> str:
        return self.constraint.name

    def validate(self, owner: object, value: str | None) -> list[str]:
        if value is None:
            return [] if self.nullable else [f"[{owner}] {self.name}: value is required"]
        return self.constraint.validate(owner, value)


def bind_constraints(pattern: str, constraints: Sequence[Constraint]) -> tuple[ConstraintBinding, ...]:
    """Pair each constraint with the next ``(*)`` placeholder in *pattern*.

    A constraint is nullable when no placeholder is left for it, or when
    its placeholder is written as ``(*)?``.
    """
    bindings: list[ConstraintBinding] = []
    pos = 0
    for constraint in constraints:
        pos = pattern.find(CAPTURED_WILDCARD, pos)
        if pos == -1:
            nullable = True
            pos = len(pattern)
        else:
            end = pos + len(CAPTURED_WILDCARD)
            nullable = pattern[end : end + 1] == OPTIONAL_MARKER
            pos = end
        bindings.append(ConstraintBinding(constraint=constraint, nullable=nullable))
    return tuple(bindings)

