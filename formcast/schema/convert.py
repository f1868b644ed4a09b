"""Build schema graphs from Python types.

Supported types:
  - str, int, float, bool, None: primitive schemas
  - list[T]: array schemas
  - T | None / Optional[T]: optional properties
  - Literal["a", "b"]: string enumerations
  - Enum subclasses: named string enumerations (dependencies)
  - dataclass, TypedDict, Pydantic BaseModel: named object schemas
    (dependencies, referenced by name)
  - Annotated[T, guide, ...]: guides attached to T's schema

Field guides and descriptions can also be declared through dataclass field
metadata::

    @dataclass
    class Review:
        rating: int = field(metadata={"guides": [Range(1, 5)], "description": "Stars"})

``guide()`` builds the same metadata::

    rating: int = field(metadata=guide(Range(1, 5), description="Stars"))

Nested models are not inlined: each becomes a named dependency and the
field refers to it by name, so a model that refers to itself (directly or
through other models) is rejected at resolution with
``CircularReferenceError``.
"""

from __future__ import annotations

import dataclasses
import typing
from enum import Enum
from types import UnionType
from typing import Any, Annotated, Literal, Union, get_args, get_origin, is_typeddict

from .._logging import scoped_logger
from ..exceptions import ValidationError
from .dynamic import (
    AnyOfSchema,
    ArraySchema,
    ObjectSchema,
    PrimitiveSchema,
    ReferenceSchema,
    SchemaNode,
    SchemaProperty,
)
from .generation import GenerationSchema
from .guides import GuideConstraint

__all__ = ["guide", "schema_for", "collect_schema", "generation_schema_for"]

log = scoped_logger("schema")

_PRIMITIVES: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    type(None): "null",
}


def _get_type_name(t: Any) -> str:
    return getattr(t, "__name__", str(t))


def guide(*guides: GuideConstraint, description: str | None = None) -> dict[str, Any]:
    """Dataclass field metadata carrying guides and an optional description."""
    for g in guides:
        if not isinstance(g, GuideConstraint):
            raise ValidationError(
                f"guide() takes guide constraints, got {type(g).__name__}",
                code="INVALID_ARGUMENT",
                details={"param": "guides", "type": type(g).__name__},
            )
    metadata: dict[str, Any] = {"guides": list(guides)}
    if description is not None:
        metadata["description"] = description
    return metadata


def _is_pydantic_model(t: Any) -> bool:
    """Pydantic v2 model class, detected without importing pydantic."""
    return isinstance(t, type) and isinstance(getattr(t, "model_fields", None), dict)


def _is_model(t: Any) -> bool:
    return (
        (isinstance(t, type) and dataclasses.is_dataclass(t))
        or is_typeddict(t)
        or _is_pydantic_model(t)
    )


def _split_optional(t: Any) -> tuple[Any, bool]:
    """Return (inner type, allows None) for ``T | None`` / ``Optional[T]``."""
    origin = get_origin(t)
    if origin is Union or origin is UnionType:
        args = get_args(t)
        if type(None) in args:
            rest = tuple(arg for arg in args if arg is not type(None))
            if len(rest) == 1:
                return rest[0], True
            return Union[rest], True  # type: ignore[return-value]
    return t, False


def _split_annotated(t: Any) -> tuple[Any, list[GuideConstraint]]:
    if get_origin(t) is Annotated:
        inner, *metadata = get_args(t)
        return inner, [m for m in metadata if isinstance(m, GuideConstraint)]
    return t, []


def _with_guides(node: SchemaNode, guides: list[GuideConstraint], where: str) -> SchemaNode:
    if not guides:
        return node
    if isinstance(node, (PrimitiveSchema, ArraySchema)):
        return dataclasses.replace(node, guides=(*node.guides, *guides))
    raise ValidationError(
        f"Guides can only be attached to primitive or list fields ({where})",
        code="INVALID_ARGUMENT",
        details={"field": where, "schema": node.kind},
    )


class _Collector:
    """Walks a type, registering each model it meets as a named dependency."""

    def __init__(self) -> None:
        self.dependencies: dict[str, SchemaNode] = {}
        self._building: set[str] = set()
        self._owners: dict[str, Any] = {}

    def model(self, t: Any) -> ObjectSchema:
        name = _get_type_name(t)
        self._claim(name, t)
        self._building.add(name)
        try:
            if _is_pydantic_model(t):
                properties = self._pydantic_properties(t)
            elif is_typeddict(t):
                properties = self._typeddict_properties(t)
            else:
                properties = self._dataclass_properties(t)
        finally:
            self._building.discard(name)
        return ObjectSchema(name=name, properties=tuple(properties))

    def _claim(self, name: str, t: Any) -> None:
        owner = self._owners.setdefault(name, t)
        if owner is not t:
            raise ValidationError(
                f"Two different types are named {name!r}",
                code="INVALID_ARGUMENT",
                details={"name": name},
            )

    def _reference_model(self, t: Any) -> ReferenceSchema:
        name = _get_type_name(t)
        self._claim(name, t)
        if name not in self.dependencies and name not in self._building:
            self.dependencies[name] = self.model(t)
        return ReferenceSchema(name)

    def _reference_enum(self, t: type[Enum]) -> ReferenceSchema:
        name = t.__name__
        self._claim(name, t)
        if name not in self.dependencies:
            self.dependencies[name] = AnyOfSchema.of_strings(name, [str(member.value) for member in t])
        return ReferenceSchema(name)

    def node(self, t: Any, where: str) -> tuple[SchemaNode, bool]:
        """Schema for ``t`` plus whether it allows None."""
        t, guides = _split_annotated(t)
        t, optional = _split_optional(t)
        inner, more = _split_annotated(t)
        guides += more
        return _with_guides(self._node(inner, where), guides, where), optional

    def _node(self, t: Any, where: str) -> SchemaNode:
        if t in _PRIMITIVES:
            return PrimitiveSchema(_PRIMITIVES[t])

        origin = get_origin(t)
        args = get_args(t)

        # Bare `list` has no origin; `list[T]` has origin list
        if origin is list or t is list:
            if args:
                element, optional = self.node(args[0], f"{where}[]")
                if optional:
                    element = AnyOfSchema(f"{where}[]", (element, PrimitiveSchema("null")))
            else:
                element = PrimitiveSchema("string")
            return ArraySchema(element)

        if origin is Literal:
            if not all(isinstance(arg, str) for arg in args):
                raise ValidationError(
                    f"Literal choices must be strings ({where})",
                    code="INVALID_ARGUMENT",
                    details={"field": where},
                )
            return AnyOfSchema.of_strings(where, args)

        if origin is Union or origin is UnionType:
            choices = tuple(self.node(arg, where)[0] for arg in args)
            return AnyOfSchema(where, choices)

        if origin is None and isinstance(t, type) and issubclass(t, Enum):
            return self._reference_enum(t)

        if _is_model(t):
            return self._reference_model(t)

        if t is Any or t is dict or origin is dict:
            return PrimitiveSchema("object")

        raise ValidationError(
            f"Unsupported type {_get_type_name(t)} ({where})",
            code="INVALID_ARGUMENT",
            details={"field": where, "type": _get_type_name(t)},
        )

    def _dataclass_properties(self, t: Any) -> list[SchemaProperty]:
        hints = typing.get_type_hints(t, include_extras=True)
        properties = []
        for field in dataclasses.fields(t):
            where = f"{t.__name__}.{field.name}"
            node, optional = self.node(hints.get(field.name, field.type), where)
            node = _with_guides(node, list(field.metadata.get("guides", ())), where)
            has_default = (
                field.default is not dataclasses.MISSING
                or field.default_factory is not dataclasses.MISSING
            )
            properties.append(
                SchemaProperty(
                    name=field.name,
                    schema=node,
                    description=field.metadata.get("description"),
                    is_optional=optional or has_default,
                )
            )
        return properties

    def _typeddict_properties(self, t: Any) -> list[SchemaProperty]:
        hints = typing.get_type_hints(t, include_extras=True)
        required = getattr(t, "__required_keys__", frozenset(hints))
        properties = []
        for name, hint in hints.items():
            node, optional = self.node(hint, f"{t.__name__}.{name}")
            properties.append(
                SchemaProperty(name=name, schema=node, is_optional=optional or name not in required)
            )
        return properties

    def _pydantic_properties(self, t: Any) -> list[SchemaProperty]:
        properties = []
        for name, info in t.model_fields.items():
            where = f"{t.__name__}.{name}"
            node, optional = self.node(info.annotation, where)
            guides = [m for m in getattr(info, "metadata", ()) if isinstance(m, GuideConstraint)]
            node = _with_guides(node, guides, where)
            properties.append(
                SchemaProperty(
                    name=name,
                    schema=node,
                    description=info.description,
                    is_optional=optional or not info.is_required(),
                )
            )
        return properties


def collect_schema(tp: Any) -> tuple[SchemaNode, dict[str, SchemaNode]]:
    """
    Build the root schema for ``tp`` and the named dependencies it refers to.

    Raises
    ------
    ValidationError
        If ``tp`` (or a field type) is not supported.
    """
    collector = _Collector()
    if _is_model(tp):
        root: SchemaNode = collector.model(tp)
    else:
        root, optional = collector.node(tp, _get_type_name(tp))
        if optional:
            root = AnyOfSchema(_get_type_name(tp), (root, PrimitiveSchema("null")))
    log.debug(
        "Collected schema",
        extra={"schema": _get_type_name(tp), "dependencies": list(collector.dependencies)},
    )
    return root, collector.dependencies


def schema_for(tp: Any) -> SchemaNode:
    """
    Root schema node for a Python type.

    Nested models appear as references; use :func:`collect_schema` or
    :func:`generation_schema_for` to get them as well.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Point:
    ...     x: int
    ...     y: int
    >>> [p.name for p in schema_for(Point).properties]
    ['x', 'y']
    """
    return collect_schema(tp)[0]


def generation_schema_for(tp: Any) -> GenerationSchema:
    """
    Resolved :class:`GenerationSchema` for a Python type.

    Raises
    ------
    CircularReferenceError
        If the type refers to itself, directly or through other models.
    ValidationError
        If ``tp`` (or a field type) is not supported.
    """
    root, dependencies = collect_schema(tp)
    return GenerationSchema(root, dependencies)
