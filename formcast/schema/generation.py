"""GenerationSchema: a root schema resolved against its dependencies."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from .dynamic import AnyOfSchema, SchemaNode
from .emit import emit
from .resolver import index_dependencies, resolve

__all__ = ["GenerationSchema"]


class GenerationSchema:
    """
    A validated, fully resolved schema ready to hand to a text generator.

    Resolution runs at construction, so every schema error surfaces here
    and never later when the schema is used.

    Parameters
    ----------
    root : SchemaNode
        The schema generated content must follow.
    dependencies : iterable of SchemaNode, or mapping of name to SchemaNode
        Named schemas that references in ``root`` may point to.

    Raises
    ------
    SchemaError
        Any resolution error (see :func:`formcast.schema.resolve`).

    Examples
    --------
    >>> from formcast.schema import ObjectSchema, PrimitiveSchema, SchemaProperty
    >>> schema = GenerationSchema(
    ...     ObjectSchema("Person", [SchemaProperty("name", PrimitiveSchema(str))])
    ... )
    >>> schema.to_json()
    '{"type":"object","properties":{"name":{"type":"string"}},"required":["name"]}'
    """

    __slots__ = ("_root", "_dependencies", "_resolved")

    def __init__(
        self,
        root: SchemaNode,
        dependencies: Iterable[SchemaNode] | Mapping[str, SchemaNode] = (),
    ) -> None:
        self._dependencies = index_dependencies(dependencies)
        self._resolved = resolve(root, self._dependencies)
        self._root = root

    @classmethod
    def from_enum(
        cls, name: str, choices: Iterable[str], description: str | None = None
    ) -> GenerationSchema:
        """
        Schema for a string enumeration.

        Raises
        ------
        EmptyTypeChoicesError
            If ``choices`` is empty.
        """
        return cls(AnyOfSchema.of_strings(name, choices, description=description))

    @property
    def root(self) -> SchemaNode:
        """The schema as authored, references included."""
        return self._root

    @property
    def dependencies(self) -> dict[str, SchemaNode]:
        """Named dependencies by name."""
        return dict(self._dependencies)

    @property
    def resolved(self) -> SchemaNode:
        """The reference-free tree."""
        return self._resolved

    @property
    def name(self) -> str | None:
        return self._root.name

    def to_schema_dict(self) -> dict[str, Any]:
        """JSON-Schema dictionary for the resolved tree (a fresh copy per call)."""
        return emit(self._resolved)

    def to_json(self, indent: int | None = None) -> str:
        """The schema dictionary as JSON text."""
        separators = (",", ":") if indent is None else (",", ": ")
        return json.dumps(self.to_schema_dict(), indent=indent, separators=separators, ensure_ascii=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GenerationSchema):
            return NotImplemented
        return self._resolved == other._resolved

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        label = f"{self._root.kind} {self._root.name!r}" if self._root.name else self._root.kind
        return f"GenerationSchema({label}, dependencies={len(self._dependencies)})"
