"""
Canonical JSON value model.

Every piece of content formcast handles, fully parsed or extracted from a
partial buffer, is represented by one of these immutable variants:

    JSONValue (base)
    ├── JSONNull
    ├── JSONBool(value)
    ├── JSONNumber(value)        - always a float (IEEE-754 double)
    ├── JSONString(value)
    ├── JSONArray(elements)
    └── JSONObject(mapping, ordered_keys)

Objects keep member order explicitly: ``ordered_keys`` is exactly the key
set of ``mapping``, in original insertion order. Lookup goes through the
mapping, iteration follows ``ordered_keys``.

Example:
    >>> obj = from_python({"b": 1, "a": [True, None]})
    >>> obj.ordered_keys
    ('b', 'a')
    >>> dumps(obj)
    '{"b":1,"a":[true,null]}'
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from ..exceptions import ValidationError

__all__ = [
    "ValueKind",
    "JSONValue",
    "JSONNull",
    "JSONBool",
    "JSONNumber",
    "JSONString",
    "JSONArray",
    "JSONObject",
    "JSON_NULL",
    "from_python",
    "to_python",
    "dumps",
]

# Largest integer a double represents exactly; integral numbers inside this
# range are rendered without a fractional part.
_MAX_SAFE_INTEGER = 2**53


class ValueKind(str, Enum):
    """Discriminator for JSON value variants."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class JSONValue:
    """Base class for the canonical JSON value variants."""

    __slots__ = ()

    kind: ClassVar[ValueKind]


@dataclass(frozen=True)
class JSONNull(JSONValue):
    """JSON ``null``."""

    kind: ClassVar[ValueKind] = ValueKind.NULL


@dataclass(frozen=True)
class JSONBool(JSONValue):
    """JSON ``true`` / ``false``."""

    value: bool

    kind: ClassVar[ValueKind] = ValueKind.BOOL


@dataclass(frozen=True)
class JSONNumber(JSONValue):
    """JSON number, stored as a double."""

    value: float

    kind: ClassVar[ValueKind] = ValueKind.NUMBER

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    @property
    def is_integral(self) -> bool:
        """True when the number has no fractional part and fits a double exactly."""
        return (
            math.isfinite(self.value)
            and self.value == math.floor(self.value)
            and abs(self.value) <= _MAX_SAFE_INTEGER
        )


@dataclass(frozen=True)
class JSONString(JSONValue):
    """JSON string."""

    value: str

    kind: ClassVar[ValueKind] = ValueKind.STRING


@dataclass(frozen=True)
class JSONArray(JSONValue):
    """JSON array of values."""

    elements: tuple[JSONValue, ...] = ()

    kind: ClassVar[ValueKind] = ValueKind.ARRAY

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[JSONValue]:
        return iter(self.elements)


@dataclass(frozen=True, eq=False)
class JSONObject(JSONValue):
    """
    JSON object with explicit member order.

    Attributes
    ----------
    mapping : Mapping[str, JSONValue]
        Key to value lookup.
    ordered_keys : tuple[str, ...]
        The keys of ``mapping`` in insertion order.

    Raises
    ------
    ValidationError
        If ``ordered_keys`` is not exactly the key set of ``mapping``.
    """

    mapping: Mapping[str, JSONValue] = field(default_factory=dict)
    ordered_keys: tuple[str, ...] = ()

    kind: ClassVar[ValueKind] = ValueKind.OBJECT

    def __post_init__(self) -> None:
        keys = tuple(self.ordered_keys)
        if len(keys) != len(self.mapping) or set(keys) != set(self.mapping):
            raise ValidationError(
                "ordered_keys must list every mapping key exactly once",
                code="INVALID_ARGUMENT",
                details={"ordered_keys": list(keys), "mapping_keys": list(self.mapping)},
            )
        object.__setattr__(self, "mapping", dict(self.mapping))
        object.__setattr__(self, "ordered_keys", keys)

    @classmethod
    def from_pairs(cls, pairs: Sequence[tuple[str, JSONValue]]) -> JSONObject:
        """Build from ordered pairs; a repeated key keeps its first position and first value."""
        mapping: dict[str, JSONValue] = {}
        order: list[str] = []
        for key, value in pairs:
            if key not in mapping:
                order.append(key)
                mapping[key] = value
        return cls(mapping, tuple(order))

    def items(self) -> Iterator[tuple[str, JSONValue]]:
        """Iterate ``(key, value)`` pairs in insertion order."""
        for key in self.ordered_keys:
            yield key, self.mapping[key]

    def get(self, key: str, default: JSONValue | None = None) -> JSONValue | None:
        return self.mapping.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.mapping

    def __getitem__(self, key: str) -> JSONValue:
        return self.mapping[key]

    def __len__(self) -> int:
        return len(self.ordered_keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JSONObject):
            return NotImplemented
        return self.ordered_keys == other.ordered_keys and self.mapping == other.mapping

    __hash__ = None  # type: ignore[assignment]


JSON_NULL = JSONNull()


# =============================================================================
# Conversion
# =============================================================================


def from_python(obj: Any) -> JSONValue:
    """
    Convert plain Python data into a ``JSONValue``.

    Accepts ``None``, ``bool``, ``int``, ``float``, ``str``, sequences
    (not strings/bytes) and string-keyed mappings. Mapping iteration order
    becomes ``ordered_keys``. ``JSONValue`` instances pass through.

    Raises
    ------
    ValidationError
        For non-finite floats, non-string keys or unsupported types.
    """
    if isinstance(obj, JSONValue):
        return obj
    if obj is None:
        return JSON_NULL
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return JSONBool(obj)
    if isinstance(obj, (int, float)):
        try:
            number = float(obj)
        except OverflowError:
            raise ValidationError(
                f"JSON numbers must fit a double, got a {obj.bit_length()}-bit int",
                code="INVALID_ARGUMENT",
                details={"bits": obj.bit_length()},
            ) from None
        if not math.isfinite(number):
            raise ValidationError(
                f"JSON numbers must be finite, got {obj!r}",
                code="INVALID_ARGUMENT",
                details={"value": repr(obj)},
            )
        return JSONNumber(number)
    if isinstance(obj, str):
        return JSONString(obj)
    if isinstance(obj, Mapping):
        mapping: dict[str, JSONValue] = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"JSON object keys must be str, got {type(key).__name__}",
                    code="INVALID_ARGUMENT",
                    details={"key": repr(key)},
                )
            mapping[key] = from_python(value)
        return JSONObject(mapping, tuple(mapping))
    if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
        return JSONArray(tuple(from_python(item) for item in obj))
    raise ValidationError(
        f"Cannot represent {type(obj).__name__} as JSON",
        code="INVALID_ARGUMENT",
        details={"type": type(obj).__name__},
    )


def to_python(value: JSONValue) -> Any:
    """
    Convert a ``JSONValue`` into plain Python data.

    Integral numbers become ``int``; objects become dicts ordered by
    ``ordered_keys``.
    """
    if isinstance(value, JSONNull):
        return None
    if isinstance(value, JSONBool):
        return value.value
    if isinstance(value, JSONNumber):
        return int(value.value) if value.is_integral else value.value
    if isinstance(value, JSONString):
        return value.value
    if isinstance(value, JSONArray):
        return [to_python(item) for item in value.elements]
    if isinstance(value, JSONObject):
        return {key: to_python(item) for key, item in value.items()}
    raise ValidationError(
        f"Not a JSON value: {type(value).__name__}",
        code="INVALID_ARGUMENT",
        details={"type": type(value).__name__},
    )


def dumps(value: JSONValue, indent: int | None = None) -> str:
    """
    Serialize to canonical JSON text.

    Member order follows ``ordered_keys``. Without ``indent`` the output is
    compact (no whitespace between tokens).
    """
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(to_python(value), ensure_ascii=False, indent=indent, separators=separators)
