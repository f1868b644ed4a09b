"""
Dynamic schemas: authoring, resolution, emission and conformance.

Example:
    >>> from formcast.schema import (
    ...     GenerationSchema, ObjectSchema, PrimitiveSchema, SchemaProperty,
    ... )
    >>> schema = GenerationSchema(
    ...     ObjectSchema("Person", [
    ...         SchemaProperty("name", PrimitiveSchema(str)),
    ...         SchemaProperty("age", PrimitiveSchema(int), is_optional=True),
    ...     ])
    ... )
    >>> schema.to_schema_dict()["properties"]["age"]
    {'type': ['integer', 'null']}
"""

from . import guides
from .conformance import check_conformance, conforms
from .convert import collect_schema, generation_schema_for, guide, schema_for
from .dynamic import (
    AnyOfSchema,
    ArraySchema,
    ObjectSchema,
    PrimitiveSchema,
    ReferenceSchema,
    SchemaNode,
    SchemaProperty,
    json_type_for,
)
from .emit import EMITTED_KEYS, emit
from .generation import GenerationSchema
from .guides import GuideConstraint
from .resolver import resolve

__all__ = [
    # Nodes
    "SchemaNode",
    "SchemaProperty",
    "ObjectSchema",
    "ArraySchema",
    "ReferenceSchema",
    "AnyOfSchema",
    "PrimitiveSchema",
    "json_type_for",
    # Guides
    "guides",
    "GuideConstraint",
    # Resolution and emission
    "resolve",
    "emit",
    "EMITTED_KEYS",
    "GenerationSchema",
    # Python types
    "guide",
    "schema_for",
    "collect_schema",
    "generation_schema_for",
    # Conformance
    "check_conformance",
    "conforms",
]
