"""
Guide constraints.

A guide is a generation hint attached to a primitive or array schema node
at authoring time. Guides travel unchanged through resolution and are
consumed only by the emitter, where each one writes its JSON-Schema keys
into the node's dictionary via :meth:`GuideConstraint.apply`. When several
guides set the same key, the last one applied wins.

    GuideConstraint (base)
    ├── Constant(value)            -> const
    ├── AnyOf(values)              -> enum
    ├── Pattern(regex)             -> pattern
    ├── Minimum(value)             -> minimum
    ├── Maximum(value)             -> maximum
    ├── Range(low, high)           -> minimum, maximum
    ├── Count(n)                   -> minItems, maxItems
    ├── MinimumCount(n)            -> minItems
    ├── MaximumCount(n)            -> maxItems
    ├── CountRange(low, high)      -> minItems, maxItems
    └── Element(guide)             -> applies guide to items

Example:
    >>> schema = {"type": "integer"}
    >>> Range(1, 10).apply(schema)
    >>> schema
    {'type': 'integer', 'minimum': 1, 'maximum': 10}
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

from ..exceptions import ValidationError

__all__ = [
    "GuideConstraint",
    "Constant",
    "AnyOf",
    "Pattern",
    "Minimum",
    "Maximum",
    "Range",
    "Count",
    "MinimumCount",
    "MaximumCount",
    "CountRange",
    "Element",
]

Number = Union[int, float]


def _check_number(param: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"{param} must be a number, got {type(value).__name__}",
            code="INVALID_ARGUMENT",
            details={"param": param, "type": type(value).__name__},
        )
    if not math.isfinite(value):
        raise ValidationError(
            f"{param} must be finite, got {value!r}",
            code="INVALID_ARGUMENT",
            details={"param": param, "value": repr(value)},
        )


def _check_count(param: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{param} must be int, got {type(value).__name__}",
            code="INVALID_ARGUMENT",
            details={"param": param, "type": type(value).__name__},
        )
    if value < 0:
        raise ValidationError(
            f"{param} must be >= 0, got {value}",
            code="INVALID_ARGUMENT",
            details={"param": param, "value": value},
        )


def _check_bounds(low: Number, high: Number) -> None:
    if low > high:
        raise ValidationError(
            f"Lower bound {low} is greater than upper bound {high}",
            code="INVALID_ARGUMENT",
            details={"low": low, "high": high},
        )


class GuideConstraint:
    """Base class for guide constraints."""

    __slots__ = ()

    def apply(self, schema: dict[str, Any]) -> None:
        """Write this guide's keys into an emitted schema dictionary."""
        raise NotImplementedError


@dataclass(frozen=True)
class Constant(GuideConstraint):
    """The string must be exactly ``value``."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise ValidationError(
                f"Constant value must be str, got {type(self.value).__name__}",
                code="INVALID_ARGUMENT",
                details={"param": "value", "type": type(self.value).__name__},
            )

    def apply(self, schema: dict[str, Any]) -> None:
        schema["const"] = self.value


@dataclass(frozen=True)
class AnyOf(GuideConstraint):
    """The string must be one of ``values``."""

    values: tuple[str, ...]

    def __init__(self, values: Iterable[str]) -> None:
        object.__setattr__(self, "values", tuple(values))
        if not self.values:
            raise ValidationError(
                "AnyOf needs at least one value",
                code="INVALID_ARGUMENT",
                details={"param": "values"},
            )
        for value in self.values:
            if not isinstance(value, str):
                raise ValidationError(
                    f"AnyOf values must be str, got {type(value).__name__}",
                    code="INVALID_ARGUMENT",
                    details={"param": "values", "type": type(value).__name__},
                )

    def apply(self, schema: dict[str, Any]) -> None:
        schema["enum"] = list(self.values)


@dataclass(frozen=True)
class Pattern(GuideConstraint):
    """The string must match the regular expression ``regex``."""

    regex: str

    def __post_init__(self) -> None:
        if isinstance(self.regex, re.Pattern):
            object.__setattr__(self, "regex", self.regex.pattern)
        try:
            re.compile(self.regex)
        except (re.error, TypeError) as e:
            raise ValidationError(
                f"Invalid pattern {self.regex!r}: {e}",
                code="INVALID_ARGUMENT",
                details={"param": "regex", "value": repr(self.regex)},
            ) from e

    def apply(self, schema: dict[str, Any]) -> None:
        schema["pattern"] = self.regex


@dataclass(frozen=True)
class Minimum(GuideConstraint):
    """Inclusive lower bound for a number."""

    value: Number

    def __post_init__(self) -> None:
        _check_number("minimum", self.value)

    def apply(self, schema: dict[str, Any]) -> None:
        schema["minimum"] = self.value


@dataclass(frozen=True)
class Maximum(GuideConstraint):
    """Inclusive upper bound for a number."""

    value: Number

    def __post_init__(self) -> None:
        _check_number("maximum", self.value)

    def apply(self, schema: dict[str, Any]) -> None:
        schema["maximum"] = self.value


@dataclass(frozen=True)
class Range(GuideConstraint):
    """Inclusive numeric range."""

    low: Number
    high: Number

    def __post_init__(self) -> None:
        _check_number("low", self.low)
        _check_number("high", self.high)
        _check_bounds(self.low, self.high)

    def apply(self, schema: dict[str, Any]) -> None:
        schema["minimum"] = self.low
        schema["maximum"] = self.high


@dataclass(frozen=True)
class Count(GuideConstraint):
    """The collection has exactly ``count`` elements."""

    count: int

    def __post_init__(self) -> None:
        _check_count("count", self.count)

    def apply(self, schema: dict[str, Any]) -> None:
        schema["minItems"] = self.count
        schema["maxItems"] = self.count


@dataclass(frozen=True)
class MinimumCount(GuideConstraint):
    count: int

    def __post_init__(self) -> None:
        _check_count("count", self.count)

    def apply(self, schema: dict[str, Any]) -> None:
        schema["minItems"] = self.count


@dataclass(frozen=True)
class MaximumCount(GuideConstraint):
    count: int

    def __post_init__(self) -> None:
        _check_count("count", self.count)

    def apply(self, schema: dict[str, Any]) -> None:
        schema["maxItems"] = self.count


@dataclass(frozen=True)
class CountRange(GuideConstraint):
    """The collection has between ``low`` and ``high`` elements, inclusive."""

    low: int
    high: int

    def __post_init__(self) -> None:
        _check_count("low", self.low)
        _check_count("high", self.high)
        _check_bounds(self.low, self.high)

    def apply(self, schema: dict[str, Any]) -> None:
        schema["minItems"] = self.low
        schema["maxItems"] = self.high


@dataclass(frozen=True)
class Element(GuideConstraint):
    """Apply ``guide`` to every element of an array."""

    guide: GuideConstraint

    def __post_init__(self) -> None:
        if not isinstance(self.guide, GuideConstraint):
            raise ValidationError(
                f"Element expects a GuideConstraint, got {type(self.guide).__name__}",
                code="INVALID_ARGUMENT",
                details={"param": "guide", "type": type(self.guide).__name__},
            )

    def apply(self, schema: dict[str, Any]) -> None:
        items = schema.get("items")
        if not isinstance(items, dict):
            items = {}
            schema["items"] = items
        self.guide.apply(items)
