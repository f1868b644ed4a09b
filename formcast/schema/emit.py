"""
Emit resolved schema trees as JSON-Schema dictionaries.

The output uses the draft 2020-12 keyword subset ``type, description,
properties, required, items, minItems, maxItems, enum, const, pattern,
minimum, maximum, anyOf``.
"""

from __future__ import annotations

from typing import Any

from .._logging import scoped_logger
from ..config import config
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

__all__ = ["emit", "EMITTED_KEYS"]

log = scoped_logger("emit")

EMITTED_KEYS = frozenset(
    {
        "type",
        "description",
        "properties",
        "required",
        "items",
        "minItems",
        "maxItems",
        "enum",
        "const",
        "pattern",
        "minimum",
        "maximum",
        "anyOf",
    }
)


def _with_description(schema: dict[str, Any], description: str | None) -> dict[str, Any]:
    if description:
        schema["description"] = description
    return schema


def _optional(schema: dict[str, Any]) -> dict[str, Any]:
    """Allow null in addition to ``schema``."""
    if "anyOf" in schema or "enum" in schema or "const" in schema:
        wrapped: dict[str, Any] = {}
        description = schema.pop("description", None)
        if description:
            wrapped["description"] = description
        wrapped["anyOf"] = [schema, {"type": "null"}]
        return wrapped

    base = schema.get("type")
    if isinstance(base, list):
        if "null" not in base:
            schema["type"] = [*base, "null"]
    elif base is None:
        schema["type"] = ["null"]
    elif base != "null":
        schema["type"] = [base, "null"]
    return schema


def _emit_property(prop: SchemaProperty) -> dict[str, Any]:
    schema = _emit(prop.schema)
    if prop.description:
        schema["description"] = prop.description
    if prop.is_optional:
        schema = _optional(schema)
    return schema


def _emit(node: SchemaNode) -> dict[str, Any]:
    if isinstance(node, ObjectSchema):
        schema: dict[str, Any] = {"type": "object"}
        _with_description(schema, node.description)
        schema["properties"] = {prop.name: _emit_property(prop) for prop in node.properties}
        schema["required"] = [prop.name for prop in node.properties if not prop.is_optional]
        return schema

    if isinstance(node, ArraySchema):
        schema = {"type": "array"}
        _with_description(schema, node.description)
        schema["items"] = _emit(node.element)
        if node.min_items is not None:
            schema["minItems"] = node.min_items
        if node.max_items is not None:
            schema["maxItems"] = node.max_items
        for guide in node.guides:
            guide.apply(schema)
        return schema

    if isinstance(node, AnyOfSchema):
        values = node.constant_values
        if values is not None:
            schema = {"type": "string"}
            _with_description(schema, node.description)
            schema["enum"] = values
            return schema
        schema = {}
        _with_description(schema, node.description)
        schema["anyOf"] = [_emit(choice) for choice in node.choices]
        return schema

    if isinstance(node, PrimitiveSchema):
        schema = {"type": node.json_type}
        _with_description(schema, node.description)
        for guide in node.guides:
            guide.apply(schema)
        return schema

    if isinstance(node, ReferenceSchema):
        raise ValidationError(
            f"Cannot emit unresolved reference {node.to!r}; resolve the schema first",
            code="INVALID_ARGUMENT",
            details={"reference": node.to},
        )

    raise ValidationError(
        f"Unknown schema node type: {type(node).__name__}",
        code="INVALID_ARGUMENT",
        details={"type": type(node).__name__},
    )


def _restrict(schema: dict[str, Any]) -> dict[str, Any]:
    """Drop keywords outside ``EMITTED_KEYS``, recursing into subschemas."""
    dropped = [key for key in schema if key not in EMITTED_KEYS]
    if dropped:
        log.debug("Dropping schema keys", extra={"keys": dropped})
    out = {key: value for key, value in schema.items() if key in EMITTED_KEYS}
    if isinstance(out.get("properties"), dict):
        out["properties"] = {
            name: _restrict(sub) if isinstance(sub, dict) else sub
            for name, sub in out["properties"].items()
        }
    if isinstance(out.get("items"), dict):
        out["items"] = _restrict(out["items"])
    if isinstance(out.get("anyOf"), list):
        out["anyOf"] = [_restrict(sub) if isinstance(sub, dict) else sub for sub in out["anyOf"]]
    return out


def emit(resolved: SchemaNode) -> dict[str, Any]:
    """
    Convert a resolved schema tree into a JSON-Schema dictionary.

    - Objects list every property; ``required`` names the non-optional
      ones. An optional property is still emitted and also accepts null:
      ``["integer", "null"]`` for simple types, ``{"anyOf": [..., {"type":
      "null"}]}`` when the property already uses ``anyOf``/``enum``/``const``.
    - An anyOf whose choices are all single constant strings collapses to
      ``{"type": "string", "enum": [...]}``.
    - Primitives emit their base type with guide keys merged in order, so
      the last guide setting a key wins. Custom type tags emit as
      ``"object"``.

    With ``formcast.config.strict_emit_keys`` set, keys outside the
    documented subset are dropped.

    Raises
    ------
    ValidationError
        If ``resolved`` still contains a reference.

    Examples
    --------
    >>> from formcast.schema import AnyOfSchema
    >>> emit(AnyOfSchema.of_strings("Color", ["red", "green", "blue"]))
    {'type': 'string', 'enum': ['red', 'green', 'blue']}
    """
    schema = _emit(resolved)
    if config.strict_emit_keys:
        schema = _restrict(schema)
    return schema
