"""Render emitted schemas as instructions for text generators."""

from .generators import (
    JsonSchemaGenerator,
    PromptGenerator,
    PromptStrategy,
    TypeScriptGenerator,
    XmlGenerator,
    get_generator,
    schema_to_prompt,
)

__all__ = [
    "schema_to_prompt",
    "get_generator",
    "PromptStrategy",
    "PromptGenerator",
    "TypeScriptGenerator",
    "JsonSchemaGenerator",
    "XmlGenerator",
]
