"""
Dynamic schema graph.

Schema nodes are immutable descriptions of the shape generated content must
have. They are authored by hand or built from Python types
(``formcast.schema.convert``) and may refer to other named nodes with a
:class:`ReferenceSchema`. References are expanded by the resolver.

    SchemaNode (base)
    ├── ObjectSchema(name, properties)        - named, referenceable
    ├── ArraySchema(element, min_items, max_items)
    ├── ReferenceSchema(to)
    ├── AnyOfSchema(name, choices)            - named, referenceable
    └── PrimitiveSchema(type, guides)

Example:
    >>> person = ObjectSchema(
    ...     name="Person",
    ...     properties=[
    ...         SchemaProperty("name", PrimitiveSchema(str)),
    ...         SchemaProperty("age", PrimitiveSchema(int), is_optional=True),
    ...     ],
    ... )
    >>> team = ObjectSchema(
    ...     name="Team",
    ...     properties=[SchemaProperty("members", ArraySchema(ReferenceSchema("Person")))],
    ... )
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, ClassVar

from ..exceptions import ValidationError
from .guides import Constant, GuideConstraint

__all__ = [
    "SchemaNode",
    "SchemaProperty",
    "ObjectSchema",
    "ArraySchema",
    "ReferenceSchema",
    "AnyOfSchema",
    "PrimitiveSchema",
    "json_type_for",
]

# Type tags (lowercased) to JSON-Schema base types. Unrecognised tags are
# custom types and emit as "object".
_JSON_TYPES = {
    "string": "string",
    "str": "string",
    "int": "integer",
    "integer": "integer",
    "float": "number",
    "double": "number",
    "number": "number",
    "decimal": "number",
    "bool": "boolean",
    "boolean": "boolean",
    "null": "null",
    "none": "null",
    "nonetype": "null",
}


def json_type_for(type_tag: str) -> str:
    """
    JSON-Schema base type for a primitive type tag.

    Examples
    --------
    >>> json_type_for("int")
    'integer'
    >>> json_type_for("GeoPoint")
    'object'
    """
    return _JSON_TYPES.get(type_tag.lower(), "object")


def _check_name(owner: str, name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise ValidationError(
            f"{owner} name must be a non-empty str, got {name!r}",
            code="INVALID_ARGUMENT",
            details={"param": "name", "value": repr(name)},
        )


def _check_node(param: str, node: Any) -> None:
    if not isinstance(node, SchemaNode):
        raise ValidationError(
            f"{param} must be a SchemaNode, got {type(node).__name__}",
            code="INVALID_ARGUMENT",
            details={"param": param, "type": type(node).__name__},
        )


def _check_guides(guides: tuple[Any, ...]) -> None:
    for guide in guides:
        if not isinstance(guide, GuideConstraint):
            raise ValidationError(
                f"guides must be GuideConstraint instances, got {type(guide).__name__}",
                code="INVALID_ARGUMENT",
                details={"param": "guides", "type": type(guide).__name__},
            )


class SchemaNode:
    """
    Base class for schema graph nodes.

    Every node exposes ``name`` (None when the node cannot be referenced)
    and ``description``.
    """

    __slots__ = ()

    kind: ClassVar[str]
    name: str | None
    description: str | None


@dataclass(frozen=True)
class SchemaProperty:
    """
    A named member of an :class:`ObjectSchema`.

    Attributes
    ----------
    name : str
        Property name.
    schema : SchemaNode
        Shape of the property's value.
    description : str, optional
        Natural-language description, emitted on the property.
    is_optional : bool
        Optional properties are left out of ``required`` and accept null.
    """

    name: str
    schema: SchemaNode
    description: str | None = None
    is_optional: bool = False

    def __post_init__(self) -> None:
        _check_name("Property", self.name)
        _check_node("schema", self.schema)


@dataclass(frozen=True)
class ObjectSchema(SchemaNode):
    """Structure with ordered properties."""

    name: str
    properties: tuple[SchemaProperty, ...] = ()
    description: str | None = None

    kind: ClassVar[str] = "object"

    def __post_init__(self) -> None:
        _check_name("Object schema", self.name)
        object.__setattr__(self, "properties", tuple(self.properties))
        for prop in self.properties:
            if not isinstance(prop, SchemaProperty):
                raise ValidationError(
                    f"properties must be SchemaProperty instances, got {type(prop).__name__}",
                    code="INVALID_ARGUMENT",
                    details={"param": "properties", "type": type(prop).__name__},
                )


@dataclass(frozen=True)
class ArraySchema(SchemaNode):
    """Array of elements sharing one schema."""

    element: SchemaNode
    min_items: int | None = None
    max_items: int | None = None
    guides: tuple[GuideConstraint, ...] = ()
    name: str | None = None
    description: str | None = None

    kind: ClassVar[str] = "array"

    def __post_init__(self) -> None:
        _check_node("element", self.element)
        for param in ("min_items", "max_items"):
            value = getattr(self, param)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ValidationError(
                    f"{param} must be a non-negative int, got {value!r}",
                    code="INVALID_ARGUMENT",
                    details={"param": param, "value": repr(value)},
                )
        if self.min_items is not None and self.max_items is not None and self.min_items > self.max_items:
            raise ValidationError(
                f"min_items ({self.min_items}) is greater than max_items ({self.max_items})",
                code="INVALID_ARGUMENT",
                details={"min_items": self.min_items, "max_items": self.max_items},
            )
        object.__setattr__(self, "guides", tuple(self.guides))
        _check_guides(self.guides)


@dataclass(frozen=True)
class ReferenceSchema(SchemaNode):
    """Stands in for the named schema ``to`` until resolution."""

    to: str

    kind: ClassVar[str] = "reference"
    name: ClassVar[None] = None
    description: ClassVar[None] = None

    def __post_init__(self) -> None:
        _check_name("Reference target", self.to)


@dataclass(frozen=True)
class AnyOfSchema(SchemaNode):
    """Union: content matches any one of ``choices``."""

    name: str
    choices: tuple[SchemaNode, ...] = ()
    description: str | None = None

    kind: ClassVar[str] = "anyOf"

    def __post_init__(self) -> None:
        _check_name("anyOf schema", self.name)
        object.__setattr__(self, "choices", tuple(self.choices))
        for choice in self.choices:
            _check_node("choices", choice)

    @classmethod
    def of_strings(
        cls, name: str, choices: Iterable[str], description: str | None = None
    ) -> AnyOfSchema:
        """
        String enumeration: one constant string primitive per choice.

        Emits as ``{"type": "string", "enum": [...]}``.
        """
        return cls(
            name=name,
            choices=tuple(
                PrimitiveSchema("string", guides=(Constant(choice),), name=choice) for choice in choices
            ),
            description=description,
        )

    @property
    def constant_values(self) -> list[str] | None:
        """Choice values when every choice is a single constant string, else None."""
        values = []
        for choice in self.choices:
            if not isinstance(choice, PrimitiveSchema) or len(choice.guides) != 1:
                return None
            guide = choice.guides[0]
            if not isinstance(guide, Constant):
                return None
            values.append(guide.value)
        return values if values else None


@dataclass(frozen=True)
class PrimitiveSchema(SchemaNode):
    """
    Scalar (or custom) type with guide constraints.

    ``type`` is a tag such as ``"string"``/``"integer"``/``"number"``/
    ``"boolean"``, or a Python type (``str``, ``int``, ``float``, ``bool``,
    ``type(None)``), stored as its name. Other tags denote custom types.
    """

    type: str
    guides: tuple[GuideConstraint, ...] = ()
    name: str | None = None
    description: str | None = None

    kind: ClassVar[str] = "primitive"

    def __post_init__(self) -> None:
        if isinstance(self.type, type):
            object.__setattr__(self, "type", self.type.__name__)
        if not isinstance(self.type, str) or not self.type:
            raise ValidationError(
                f"Primitive type must be a type or non-empty str, got {self.type!r}",
                code="INVALID_ARGUMENT",
                details={"param": "type", "value": repr(self.type)},
            )
        object.__setattr__(self, "guides", tuple(self.guides))
        _check_guides(self.guides)

    @property
    def json_type(self) -> str:
        """The JSON-Schema base type this primitive emits as."""
        return json_type_for(self.type)
