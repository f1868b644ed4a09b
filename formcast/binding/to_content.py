"""Convert Python values into GeneratedContent."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any

from ..content.generated import GeneratedContent, GenerationID
from ..exceptions import ValidationError

__all__ = ["to_content"]


def to_content(obj: Any, id: GenerationID | None = None) -> GeneratedContent:
    """
    Convert a Python value into resolved ``GeneratedContent``.

    Dataclass fields keep their declaration order, mappings their
    iteration order. Enums become their value; Pydantic models are dumped
    with ``model_dump(mode="json")``.

    Raises
    ------
    ValidationError
        If ``obj`` (or a nested value) cannot be represented as JSON.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Point:
    ...     x: int
    ...     y: int
    >>> to_content(Point(1, 2)).json_string
    '{"x":1,"y":2}'
    """
    if isinstance(obj, GeneratedContent):
        return obj if id is None else obj.with_id(id)

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return GeneratedContent.from_properties(
            ((f.name, to_content(getattr(obj, f.name))) for f in dataclasses.fields(obj)),
            id=id,
        )

    # Pydantic v2 instances have model_dump (detected without importing pydantic)
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump) and not isinstance(obj, type):
        return GeneratedContent(model_dump(mode="json"), id=id)

    if isinstance(obj, Enum):
        return to_content(obj.value, id=id)

    if isinstance(obj, Mapping):
        return GeneratedContent.from_properties(
            ((key, to_content(value)) for key, value in obj.items()), id=id
        )

    if isinstance(obj, (list, tuple)):
        return GeneratedContent.from_elements((to_content(item) for item in obj), id=id)

    if obj is None or isinstance(obj, (bool, int, float, str)):
        return GeneratedContent(obj, id=id)

    raise ValidationError(
        f"Cannot convert {type(obj).__name__} to generated content",
        code="INVALID_ARGUMENT",
        details={"type": type(obj).__name__},
    )
