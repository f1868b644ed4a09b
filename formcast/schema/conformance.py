"""
Kind/shape conformance of generated content against a resolved schema.

This is a structural check only: guide constraints (ranges, patterns,
counts, enumerations) are descriptive and are not enforced here.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..content.extract import extract, scan_string
from ..content.generated import ContentKind, GeneratedContent
from ..exceptions import ValidationError
from .dynamic import AnyOfSchema, ArraySchema, ObjectSchema, PrimitiveSchema, SchemaNode

__all__ = ["check_conformance", "conforms"]

_KINDS_FOR_JSON_TYPE = {
    "string": {ContentKind.STRING},
    "integer": {ContentKind.NUMBER},
    "number": {ContentKind.NUMBER},
    "boolean": {ContentKind.BOOL},
    "null": {ContentKind.NULL},
    "object": {ContentKind.STRUCTURE},
}


@dataclass
class _Frame:
    path: str
    is_object: bool
    key: str | None = None
    index: int = 0

    def child_path(self) -> str:
        if self.is_object:
            return f"{self.path}.{self.key}"
        return f"{self.path}[{self.index}]"


def _open_paths(raw: str) -> frozenset[str]:
    """Paths of the containers still open at the end of streaming text."""
    frames: list[_Frame] = []
    i, n = 0, len(raw)
    while i < n:
        c = raw[i]
        if c == '"':
            key, end, closed = scan_string(raw, i, allow_partial=False)
            if not closed:
                break
            top = frames[-1] if frames else None
            if top is not None and top.is_object and top.key is None:
                top.key = key
            i = end
            continue
        if c in "{[":
            path = frames[-1].child_path() if frames else "$"
            frames.append(_Frame(path, is_object=c == "{"))
        elif c in "}]":
            if frames:
                frames.pop()
        elif c == "," and frames:
            top = frames[-1]
            top.key = None
            top.index += 1
        i += 1
    return frozenset(frame.path for frame in frames)


def _check(
    content: GeneratedContent,
    node: SchemaNode,
    path: str,
    open_paths: frozenset[str],
    out: list[str],
) -> None:
    kind = content.kind.type

    if isinstance(node, PrimitiveSchema):
        json_type = node.json_type
        if kind not in _KINDS_FOR_JSON_TYPE[json_type]:
            out.append(f"{path}: expected {json_type}, found {kind.value}")
        elif json_type == "integer" and not float(content.kind.value).is_integer():
            out.append(f"{path}: expected integer, found {content.kind.value!r}")
        return

    if isinstance(node, ObjectSchema):
        if kind is not ContentKind.STRUCTURE:
            out.append(f"{path}: expected object {node.name!r}, found {kind.value}")
            return
        properties = content.properties()
        for prop in node.properties:
            child = properties.get(prop.name)
            if child is None:
                if path not in open_paths and not prop.is_optional:
                    out.append(f"{path}: missing required property {prop.name!r}")
                continue
            if prop.is_optional and child.kind.type is ContentKind.NULL:
                continue
            _check(child, prop.schema, f"{path}.{prop.name}", open_paths, out)
        return

    if isinstance(node, ArraySchema):
        if kind is not ContentKind.ARRAY:
            out.append(f"{path}: expected array, found {kind.value}")
            return
        for i, element in enumerate(content.elements()):
            _check(element, node.element, f"{path}[{i}]", open_paths, out)
        return

    if isinstance(node, AnyOfSchema):
        for choice in node.choices:
            attempt: list[str] = []
            _check(content, choice, path, open_paths, attempt)
            if not attempt:
                return
        out.append(f"{path}: does not match any choice of {node.name!r}")
        return

    raise ValidationError(
        f"Cannot check conformance against {type(node).__name__}; resolve the schema first",
        code="INVALID_ARGUMENT",
        details={"type": type(node).__name__},
    )


def check_conformance(content: GeneratedContent, resolved: SchemaNode) -> list[str]:
    """
    List the ways ``content`` does not have the shape of ``resolved``.

    Checks the kind of every node, required properties and array elements;
    an anyOf is satisfied by any one choice. In streaming content, required
    properties are not reported missing from an object that is still open,
    and nothing is reported before a first value can be read.

    Parameters
    ----------
    content : GeneratedContent
        Content to check, complete or streaming.
    resolved : SchemaNode
        A resolved schema tree (``GenerationSchema.resolved``).

    Returns
    -------
    list[str]
        Human-readable violations with JSON paths; empty when conforming.

    Examples
    --------
    >>> from formcast.schema import generation_schema_for
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Point:
    ...     x: int
    ...     y: int
    >>> schema = generation_schema_for(Point)
    >>> check_conformance(GeneratedContent({"x": 1, "y": "2"}), schema.resolved)
    ['$.y: expected integer, found string']
    """
    out: list[str] = []
    if content.raw is None:
        open_paths: frozenset[str] = frozenset()
    elif extract(content.raw).value is None:
        # Nothing recognisable has been generated yet
        return out
    else:
        open_paths = _open_paths(content.raw)
    _check(content, resolved, "$", open_paths, out)
    return out


def conforms(content: GeneratedContent, resolved: SchemaNode) -> bool:
    """True when :func:`check_conformance` finds nothing."""
    return not check_conformance(content, resolved)
