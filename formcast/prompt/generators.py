"""Prompt description strategies for emitted schemas.

Text generators vary in how they prefer to receive format instructions:
- Coding-tuned generators follow TypeScript declarations well
- Older generators prefer the raw JSON Schema
- Instruction-tuned generators often prefer XML-wrapped field lists
"""

from __future__ import annotations

import json
from typing import Any, Literal, Protocol

from ..exceptions import ValidationError

__all__ = [
    "PromptGenerator",
    "TypeScriptGenerator",
    "JsonSchemaGenerator",
    "XmlGenerator",
    "PromptStrategy",
    "get_generator",
    "schema_to_prompt",
]

PromptStrategy = Literal["typescript", "json_schema", "xml_schema"]


def _preamble(allow_thinking: bool) -> list[str]:
    lines = []
    if allow_thinking:
        lines.extend(
            [
                "First, analyze the request inside <think></think> tags.",
                "Close the </think> tag before the final response.",
                "Then output your response as JSON with no extra text.",
                "",
            ]
        )
    lines.append("Respond with JSON matching this schema:")
    lines.append("Output a single-line JSON response with no extra whitespace.")
    lines.append("Use the exact values requested by the user.")
    return lines


def _one_line(text: str) -> str:
    return text.replace("\n", " ").strip()


class PromptGenerator(Protocol):
    """Protocol for prompt generation strategies."""

    def generate(
        self,
        schema: dict[str, Any],
        allow_thinking: bool = False,
    ) -> str:
        """Generate a prompt description from a JSON Schema."""
        ...


class TypeScriptGenerator:
    """TypeScript declaration strategy (default)."""

    def generate(
        self,
        schema: dict[str, Any],
        allow_thinking: bool = False,
    ) -> str:
        """Generate TypeScript declarations from an emitted schema."""
        lines = _preamble(allow_thinking)
        lines.append("```typescript")

        description = schema.get("description")
        if description:
            lines.append(f"// {_one_line(description)}")

        if "anyOf" in schema:
            lines.extend(self._emit_root_union(schema))
        elif schema.get("type") == "object":
            lines.extend(self._emit_interface("Response", schema))
        else:
            lines.append(f"type Response = {self._resolve_type(schema)};")

        lines.append("```")
        return "\n".join(lines)

    def _emit_root_union(self, schema: dict[str, Any]) -> list[str]:
        lines = []
        type_names = []
        for i, option in enumerate(schema["anyOf"]):
            name = f"Option{i + 1}"
            type_names.append(name)
            if option.get("type") == "object":
                lines.extend(self._emit_interface(name, option))
            else:
                lines.append(f"type {name} = {self._resolve_type(option)};")
            lines.append("")
        lines.append(f"type Response = {' | '.join(type_names)};")
        return lines

    def _emit_interface(self, name: str, schema: dict[str, Any]) -> list[str]:
        lines = [f"interface {name} {{"]
        lines.extend(self._members(schema, indent=2))
        lines.append("}")
        return lines

    def _members(self, schema: dict[str, Any], indent: int) -> list[str]:
        pad = " " * indent
        required = set(schema.get("required", []))
        lines = []
        for prop_name, prop_schema in schema.get("properties", {}).items():
            type_str = self._resolve_type(prop_schema, indent)
            optional = "" if prop_name in required else "?"
            description = _one_line(prop_schema.get("description", ""))
            comment = f"  // {description}" if description else ""
            lines.append(f"{pad}{prop_name}{optional}: {type_str};{comment}")
        return lines

    def _resolve_type(self, prop: dict[str, Any], indent: int = 0) -> str:
        if "anyOf" in prop:
            types = [self._resolve_type(option, indent) for option in prop["anyOf"]]
            if "null" in types:
                types = [t for t in types if t != "null"] + ["null"]
            return " | ".join(types)

        if "enum" in prop:
            return " | ".join(json.dumps(v) for v in prop["enum"])

        if "const" in prop:
            return json.dumps(prop["const"])

        type_val = prop.get("type")
        if isinstance(type_val, list):
            return " | ".join(self._resolve_type({**prop, "type": t}, indent) for t in type_val)

        if type_val == "string":
            return "string"
        if type_val in ("number", "integer"):
            return "number"
        if type_val == "boolean":
            return "boolean"
        if type_val == "null":
            return "null"
        if type_val == "array":
            item_type = self._resolve_type(prop.get("items", {}), indent)
            if " | " in item_type:
                item_type = f"({item_type})"
            return f"{item_type}[]"
        if type_val == "object":
            if not prop.get("properties"):
                return "object"
            inner = self._members(prop, indent + 4)
            closing = " " * (indent + 2)
            return "{\n" + "\n".join(inner) + f"\n{closing}}}"

        return "any"


class JsonSchemaGenerator:
    """JSON Schema dump strategy for older generators."""

    def generate(
        self,
        schema: dict[str, Any],
        allow_thinking: bool = False,
    ) -> str:
        """Generate JSON schema dump string."""
        lines = _preamble(allow_thinking)
        lines.append("```json")
        lines.append(json.dumps(schema, indent=2, ensure_ascii=False))
        lines.append("```")
        return "\n".join(lines)


class XmlGenerator:
    """XML-wrapped field list strategy."""

    def generate(
        self,
        schema: dict[str, Any],
        allow_thinking: bool = False,
    ) -> str:
        """Generate XML-wrapped schema string."""
        lines = _preamble(allow_thinking)
        lines.append("<schema>")
        lines.extend(self._schema_to_xml(schema, indent=2))
        lines.append("</schema>")
        return "\n".join(lines)

    def _type_label(self, prop: dict[str, Any]) -> str:
        if "enum" in prop:
            return "enum(" + ", ".join(f'"{v}"' for v in prop["enum"]) + ")"
        if "anyOf" in prop:
            return " | ".join(self._type_label(option) for option in prop["anyOf"])
        type_val = prop.get("type", "any")
        if isinstance(type_val, list):
            return " | ".join(type_val)
        if type_val == "array":
            return f"array<{self._type_label(prop.get('items', {}))}>"
        return type_val

    def _schema_to_xml(
        self,
        schema: dict[str, Any],
        indent: int = 0,
    ) -> list[str]:
        lines = []
        pad = " " * indent

        if "properties" not in schema:
            lines.append(f'{pad}<value type="{self._type_label(schema)}"/>')
            return lines

        required = schema.get("required", [])
        for name, prop in schema["properties"].items():
            req_attr = ' required="true"' if name in required else ""
            desc = _one_line(prop.get("description", ""))
            comment = f"  <!-- {desc} -->" if desc else ""

            if prop.get("type") == "object" and prop.get("properties"):
                lines.append(f'{pad}<field name="{name}" type="object"{req_attr}>{comment}')
                lines.extend(self._schema_to_xml(prop, indent + 2))
                lines.append(f"{pad}</field>")
            else:
                lines.append(
                    f'{pad}<field name="{name}" type="{self._type_label(prop)}"{req_attr}/>{comment}'
                )

        return lines


_GENERATORS: dict[str, type[PromptGenerator]] = {
    "typescript": TypeScriptGenerator,
    "json_schema": JsonSchemaGenerator,
    "xml_schema": XmlGenerator,
}


def get_generator(strategy: PromptStrategy) -> PromptGenerator:
    """Get a prompt generator by strategy name."""
    if strategy not in _GENERATORS:
        raise ValidationError(
            f"Unknown prompt strategy: {strategy}. Valid options: {list(_GENERATORS.keys())}",
            code="INVALID_ARGUMENT",
            details={"param": "strategy", "value": strategy, "allowed": list(_GENERATORS.keys())},
        )
    return _GENERATORS[strategy]()


def schema_to_prompt(
    schema: Any,
    strategy: PromptStrategy = "typescript",
    allow_thinking: bool = False,
) -> str:
    """
    Render a schema as format instructions for a text generator.

    Parameters
    ----------
    schema : dict or GenerationSchema
        An emitted schema dictionary, or anything with ``to_schema_dict()``.
    strategy : {"typescript", "json_schema", "xml_schema"}
        Rendering strategy.
    allow_thinking : bool, default False
        Prefix instructions that let the generator reason in ``<think>``
        tags before answering.

    Raises
    ------
    ValidationError
        If ``strategy`` is unknown or ``schema`` is not a schema.
    """
    to_schema_dict = getattr(schema, "to_schema_dict", None)
    if callable(to_schema_dict):
        schema = to_schema_dict()
    if not isinstance(schema, dict):
        raise ValidationError(
            f"Expected a schema dict or GenerationSchema, got {type(schema).__name__}",
            code="INVALID_ARGUMENT",
            details={"param": "schema", "type": type(schema).__name__},
        )
    return get_generator(strategy).generate(schema, allow_thinking=allow_thinking)
