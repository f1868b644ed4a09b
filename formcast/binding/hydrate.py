"""Hydrate GeneratedContent into dataclass, TypedDict, or Pydantic model instances."""

from __future__ import annotations

import dataclasses
import typing
from enum import Enum
from types import UnionType
from typing import Annotated, Any, TypeVar, Union, cast, get_args, get_origin, is_typeddict

from ..content.generated import ContentKind, GeneratedContent
from ..exceptions import DictionaryExpectedError, MissingPropertyError, TypeMismatchError

__all__ = ["hydrate"]

T = TypeVar("T")


def _is_pydantic_model(cls: type | Any) -> bool:
    """Check if cls is a Pydantic BaseModel (without importing pydantic)."""
    return callable(getattr(cls, "model_validate", None))


def _strip(tp: Any) -> tuple[Any, bool]:
    """Drop Annotated metadata and report whether the type accepts None."""
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    origin = get_origin(tp)
    if origin is Union or origin is UnionType:
        args = get_args(tp)
        if type(None) in args:
            rest = [arg for arg in args if arg is not type(None)]
            return (rest[0] if len(rest) == 1 else Any), True
    return tp, False


def _structure(content: GeneratedContent) -> dict[str, Any]:
    kind = content.kind.type
    if kind is not ContentKind.STRUCTURE:
        raise DictionaryExpectedError(kind.value)
    return content.to_python()


def _hydrate_value(tp: Any, content: GeneratedContent) -> Any:
    tp, optional = _strip(tp)

    if content.kind.type is ContentKind.NULL and (optional or tp is Any or tp is type(None)):
        return None

    if tp is GeneratedContent:
        return content

    origin = get_origin(tp)
    if origin is list or tp is list:
        args = get_args(tp)
        item_type = args[0] if args else Any
        return [_hydrate_value(item_type, element) for element in content.elements()]

    if origin is None and isinstance(tp, type) and issubclass(tp, Enum):
        raw = content.to_python()
        try:
            return tp(raw)
        except ValueError:
            # String-typed content for a non-string Enum
            for member in tp:
                if str(member.value) == raw:
                    return member
            raise TypeMismatchError(tp.__name__, content.kind.type.value) from None

    if tp in (bool, int, float, str):
        return content.value(tp)

    if (isinstance(tp, type) and dataclasses.is_dataclass(tp)) or is_typeddict(tp) or _is_pydantic_model(tp):
        return hydrate(tp, content)

    return content.to_python()


def hydrate(cls: type[T], content: GeneratedContent) -> T:
    """Recursively build a dataclass, TypedDict, or Pydantic model from content.

    Supports:
    - dataclass: reads each field through named property access, recursing
      into nested dataclasses and ``list[dataclass]``
    - TypedDict: returns the structure as a plain dict
    - Pydantic BaseModel: uses model_validate() (no pydantic import needed)

    Fields with defaults may be absent; a missing required field raises
    ``MissingPropertyError``. While content is still streaming, fields
    that have not been generated yet are missing too.

    Raises
    ------
    DictionaryExpectedError
        If the content is not a structure.
    MissingPropertyError
        If a required dataclass field has no property.
    TypeMismatchError
        If a property cannot be read as its field's type.
    """
    # Pydantic v2 models have model_validate method
    if _is_pydantic_model(cls):
        return cast(Any, cls).model_validate(_structure(content))

    # TypedDict: the dict IS the result, no conversion needed
    if is_typeddict(cls):
        return cast(T, _structure(content))

    if not dataclasses.is_dataclass(cls):
        return cast(T, _hydrate_value(cls, content))

    properties = content.properties()
    field_types = typing.get_type_hints(cls, include_extras=True)
    kwargs: dict[str, Any] = {}

    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        target_type = field_types.get(field.name, field.type)
        prop = properties.get(field.name)
        has_default = (
            field.default is not dataclasses.MISSING
            or field.default_factory is not dataclasses.MISSING
        )
        nullable = _strip(target_type)[1]
        if prop is not None and has_default and not nullable and prop.kind.type is ContentKind.NULL:
            # Defaulted fields are emitted as nullable; null means "use the default"
            prop = None
        if prop is None:
            if has_default:
                continue
            if nullable:
                kwargs[field.name] = None
                continue
            raise MissingPropertyError(field.name)
        kwargs[field.name] = _hydrate_value(target_type, prop)

    return cast(Any, cls)(**kwargs)
