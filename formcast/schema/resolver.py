"""
Schema resolution.

Expands a schema graph plus its named dependencies into a resolved tree:
the same node types with every :class:`ReferenceSchema` replaced by its
(recursively resolved) target. Resolved trees are acyclic by construction;
a reference cycle is an error, never an infinite expansion.

Validation happens in two phases:

1. A pre-pass over the root and every dependency, before any expansion:
   sibling properties must have distinct names (``DuplicatePropertyError``)
   and named dependencies must not collide (``DuplicateTypeError``).
2. Expansion, with a path-local set of names being expanded:
   ``CircularReferenceError``, ``UndefinedReferenceError``,
   ``EmptyTypeChoicesError`` and ``SchemaDepthError``.

Resolution is a pure function of its inputs; the dependency mapping is
only read.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from .._logging import scoped_logger
from ..config import config
from ..exceptions import (
    CircularReferenceError,
    DuplicatePropertyError,
    DuplicateTypeError,
    EmptyTypeChoicesError,
    SchemaDepthError,
    SchemaError,
    UndefinedReferenceError,
    ValidationError,
)
from .dynamic import (
    AnyOfSchema,
    ArraySchema,
    ObjectSchema,
    PrimitiveSchema,
    ReferenceSchema,
    SchemaNode,
)

__all__ = ["resolve", "index_dependencies", "count_nodes"]

log = scoped_logger("resolve")


def index_dependencies(
    dependencies: Iterable[SchemaNode] | Mapping[str, SchemaNode],
) -> dict[str, SchemaNode]:
    """
    Build the name -> schema lookup used for reference resolution.

    Parameters
    ----------
    dependencies : iterable of SchemaNode, or mapping of name to SchemaNode
        Named schemas that references may point to. A mapping's keys are
        the names references use.

    Raises
    ------
    DuplicateTypeError
        If two distinct schemas share a name.
    ValidationError
        If a dependency has no name.
    """
    if isinstance(dependencies, Mapping):
        pairs = list(dependencies.items())
    else:
        pairs = []
        for node in dependencies:
            if not isinstance(node, SchemaNode) or not node.name:
                raise ValidationError(
                    f"Dependencies must be named schema nodes, got {node!r}",
                    code="INVALID_ARGUMENT",
                    details={"param": "dependencies"},
                )
            pairs.append((node.name, node))

    index: dict[str, SchemaNode] = {}
    for name, node in pairs:
        existing = index.get(name)
        if existing is not None and existing is not node:
            raise DuplicateTypeError(None, name)
        index[name] = node
    return index


def _check_properties(node: SchemaNode, seen: set[int]) -> None:
    """Pre-pass: walk inline nodes (not references) checking sibling property names."""
    if id(node) in seen:
        return
    seen.add(id(node))
    if isinstance(node, ObjectSchema):
        names: set[str] = set()
        for prop in node.properties:
            if prop.name in names:
                raise DuplicatePropertyError(node.name, prop.name)
            names.add(prop.name)
            _check_properties(prop.schema, seen)
    elif isinstance(node, ArraySchema):
        _check_properties(node.element, seen)
    elif isinstance(node, AnyOfSchema):
        for choice in node.choices:
            _check_properties(choice, seen)


def count_nodes(node: SchemaNode) -> int:
    """Number of nodes in a (resolved or dynamic) tree, references counted once."""
    if isinstance(node, ObjectSchema):
        return 1 + sum(count_nodes(prop.schema) for prop in node.properties)
    if isinstance(node, ArraySchema):
        return 1 + count_nodes(node.element)
    if isinstance(node, AnyOfSchema):
        return 1 + sum(count_nodes(choice) for choice in node.choices)
    return 1


class _Resolver:
    """Expansion state for one ``resolve()`` call."""

    def __init__(self, dependencies: Mapping[str, SchemaNode], limit: int) -> None:
        self._dependencies = dependencies
        self._limit = limit
        # Innermost named schema, for error context
        self._owner: list[str] = []

    def expand(self, node: SchemaNode, visited: tuple[str, ...], depth: int) -> SchemaNode:
        if depth > self._limit:
            raise SchemaDepthError(depth, self._limit)

        if isinstance(node, ObjectSchema):
            self._owner.append(node.name)
            try:
                properties = tuple(
                    replace(prop, schema=self.expand(prop.schema, visited, depth + 1))
                    for prop in node.properties
                )
            finally:
                self._owner.pop()
            return replace(node, properties=properties)

        if isinstance(node, ArraySchema):
            return replace(node, element=self.expand(node.element, visited, depth + 1))

        if isinstance(node, ReferenceSchema):
            name = node.to
            if name in visited:
                raise CircularReferenceError(name, list(visited))
            target = self._dependencies.get(name)
            if target is None:
                raise UndefinedReferenceError(name, self._owner[-1] if self._owner else None)
            return self.expand(target, (*visited, name), depth + 1)

        if isinstance(node, AnyOfSchema):
            if not node.choices:
                raise EmptyTypeChoicesError(node.name)
            # Every branch shares the same path: a cycle through any branch is a cycle.
            self._owner.append(node.name)
            try:
                choices = tuple(self.expand(choice, visited, depth + 1) for choice in node.choices)
            finally:
                self._owner.pop()
            return replace(node, choices=choices)

        if isinstance(node, PrimitiveSchema):
            return node

        raise ValidationError(
            f"Unknown schema node type: {type(node).__name__}",
            code="INVALID_ARGUMENT",
            details={"type": type(node).__name__},
        )


def resolve(
    root: SchemaNode,
    dependencies: Iterable[SchemaNode] | Mapping[str, SchemaNode] = (),
) -> SchemaNode:
    """
    Expand ``root`` into a reference-free, acyclic schema tree.

    Property order, optionality, array bounds and guides are carried over
    unchanged. A named root is part of the expansion path, so a reference
    back to it is a cycle.

    Parameters
    ----------
    root : SchemaNode
        The schema to resolve.
    dependencies : iterable of SchemaNode, or mapping of name to SchemaNode
        Named schemas references may point to.

    Returns
    -------
    SchemaNode
        The resolved tree. Contains no ``ReferenceSchema``.

    Raises
    ------
    DuplicatePropertyError
        Two sibling properties share a name (root or any dependency).
    DuplicateTypeError
        Two dependencies share a name.
    UndefinedReferenceError
        A reachable reference names a schema not in ``dependencies``.
    CircularReferenceError
        A reference leads back to a schema already being expanded.
    EmptyTypeChoicesError
        A reachable anyOf schema has no choices.
    SchemaDepthError
        Expansion nests deeper than ``formcast.config.max_schema_depth``.

    Examples
    --------
    >>> from formcast.schema import ObjectSchema, ReferenceSchema, SchemaProperty
    >>> a = ObjectSchema("A", [SchemaProperty("b", ReferenceSchema("B"))])
    >>> b = ObjectSchema("B", [SchemaProperty("a", ReferenceSchema("A"))])
    >>> resolve(a, [b])
    Traceback (most recent call last):
    ...
    formcast.exceptions.exceptions.CircularReferenceError: Circular reference to 'A': A -> B -> A
    """
    if not isinstance(root, SchemaNode):
        raise ValidationError(
            f"root must be a SchemaNode, got {type(root).__name__}",
            code="INVALID_ARGUMENT",
            details={"param": "root", "type": type(root).__name__},
        )

    try:
        index = index_dependencies(dependencies)
        seen: set[int] = set()
        _check_properties(root, seen)
        for node in index.values():
            _check_properties(node, seen)

        log.debug(
            "Resolving schema",
            extra={"schema": root.name, "dependencies": sorted(index)},
        )
        visited = (root.name,) if root.name else ()
        resolved = _Resolver(index, config.max_schema_depth).expand(root, visited, 0)
    except SchemaError as e:
        log.debug(
            "Schema resolution failed",
            extra={"schema": root.name, "code": e.code, "details": e.details},
        )
        raise

    log.debug("Resolved schema", extra={"schema": root.name, "nodes": count_nodes(resolved)})
    return resolved

