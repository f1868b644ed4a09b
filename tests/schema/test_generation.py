"""
Tests for formcast.schema.generation - GenerationSchema.
"""

import json

import pytest

from formcast import GenerationSchema
from formcast.exceptions import CircularReferenceError, EmptyTypeChoicesError
from formcast.schema import (
    ArraySchema,
    ObjectSchema,
    PrimitiveSchema,
    ReferenceSchema,
    SchemaProperty,
)

PERSON = ObjectSchema(
    "Person",
    [
        SchemaProperty("name", PrimitiveSchema(str)),
        SchemaProperty("age", PrimitiveSchema(int), is_optional=True),
    ],
)


class TestGenerationSchema:
    """Tests for building and emitting a GenerationSchema."""

    def test_person_schema(self):
        """A required name and an optional age."""
        schema = GenerationSchema(PERSON)
        assert schema.to_schema_dict() == {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "age": {"type": ["integer", "null"]},
            },
            "required": ["name"],
        }

    def test_to_json_compact(self):
        """to_json() is compact by default."""
        schema = GenerationSchema(
            ObjectSchema("Person", [SchemaProperty("name", PrimitiveSchema(str))])
        )
        assert schema.to_json() == (
            '{"type":"object","properties":{"name":{"type":"string"}},"required":["name"]}'
        )

    def test_to_json_indent(self):
        """to_json(indent=...) pretty-prints the same dictionary."""
        schema = GenerationSchema(PERSON)
        text = schema.to_json(indent=2)
        assert "\n" in text
        assert json.loads(text) == schema.to_schema_dict()

    def test_from_enum(self):
        """String enumerations emit as a string enum."""
        schema = GenerationSchema.from_enum("Color", ["red", "green", "blue"])
        assert schema.to_schema_dict() == {"type": "string", "enum": ["red", "green", "blue"]}
        assert schema.name == "Color"

    def test_from_enum_empty(self):
        """An enumeration needs choices."""
        with pytest.raises(EmptyTypeChoicesError):
            GenerationSchema.from_enum("Nothing", [])

    def test_errors_at_construction(self):
        """Schema errors surface when the schema is built."""
        loop = ObjectSchema("Loop", [SchemaProperty("again", ReferenceSchema("Loop"))])
        with pytest.raises(CircularReferenceError):
            GenerationSchema(loop, [loop])

    def test_dependencies(self):
        """Dependencies are kept by name; the accessor returns a copy."""
        team = ObjectSchema("Team", [SchemaProperty("members", ArraySchema(ReferenceSchema("Person")))])
        schema = GenerationSchema(team, [PERSON])
        assert schema.dependencies == {"Person": PERSON}
        schema.dependencies.clear()
        assert schema.dependencies == {"Person": PERSON}

    def test_root_and_resolved(self):
        """root is as authored; resolved has no references."""
        team = ObjectSchema("Team", [SchemaProperty("lead", ReferenceSchema("Person"))])
        schema = GenerationSchema(team, [PERSON])
        assert schema.root is team
        assert schema.resolved.properties[0].schema == PERSON

    def test_fresh_dict(self):
        """Mutating an emitted dictionary does not affect later calls."""
        schema = GenerationSchema(PERSON)
        schema.to_schema_dict()["required"].append("age")
        assert schema.to_schema_dict()["required"] == ["name"]

    def test_equality(self):
        """Schemas with the same resolved tree are equal."""
        inline = GenerationSchema(ObjectSchema("Team", [SchemaProperty("lead", PERSON)]))
        referenced = GenerationSchema(
            ObjectSchema("Team", [SchemaProperty("lead", ReferenceSchema("Person"))]), [PERSON]
        )
        assert inline == referenced
        with pytest.raises(TypeError):
            hash(inline)

    def test_repr(self):
        """repr names the root and counts dependencies."""
        assert repr(GenerationSchema(PERSON)) == "GenerationSchema(object 'Person', dependencies=0)"
        assert (
            repr(GenerationSchema(ReferenceSchema("Person"), [PERSON]))
            == "GenerationSchema(reference, dependencies=1)"
        )
