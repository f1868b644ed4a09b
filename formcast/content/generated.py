"""
GeneratedContent - the content node for structured generation output.

A ``GeneratedContent`` is in exactly one of two modes:

- **resolved**: holds a fully parsed ``JSONValue`` root. Always complete.
- **streaming**: holds the raw text accumulated so far. Every query
  re-extracts the text (see ``formcast.content.extract``); nothing derived
  from it is cached, since the text may be a snapshot of a growing stream.

Example:
    >>> content = GeneratedContent.streaming('{"title": "A story of')
    >>> content.kind.type
    <ContentKind.STRUCTURE: 'structure'>
    >>> content.value(str, for_property="title")
    'A story of'
    >>> content.is_complete
    False
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar, overload

from .._logging import scoped_logger
from ..exceptions import (
    ArrayExpectedError,
    DictionaryExpectedError,
    InvalidJSONError,
    MissingPropertyError,
    TypeMismatchError,
    ValidationError,
)
from .extract import extract, is_balanced, parse_complete
from .value import (
    JSON_NULL,
    JSONArray,
    JSONBool,
    JSONNull,
    JSONNumber,
    JSONObject,
    JSONString,
    JSONValue,
    dumps,
    from_python,
    to_python,
)

__all__ = ["GeneratedContent", "GenerationID", "Kind", "ContentKind"]

log = scoped_logger("content")

T = TypeVar("T")

_INT_RE = re.compile(r"-?(0|[1-9][0-9]*)\Z")
_FLOAT_RE = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?\Z")


@dataclass(frozen=True)
class GenerationID:
    """Opaque identifier for one generation. Not part of content equality."""

    value: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __str__(self) -> str:
        return self.value


class ContentKind(str, Enum):
    """Classification of a content node."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    STRUCTURE = "structure"


_KIND_OF_VALUE = {
    JSONNull: ContentKind.NULL,
    JSONBool: ContentKind.BOOL,
    JSONNumber: ContentKind.NUMBER,
    JSONString: ContentKind.STRING,
    JSONArray: ContentKind.ARRAY,
    JSONObject: ContentKind.STRUCTURE,
}


@dataclass(frozen=True, eq=False)
class Kind:
    """
    Typed view of a content node.

    Attributes
    ----------
    type : ContentKind
        Which variant this is.
    value : Any
        ``None`` for null, ``bool``/``float``/``str`` for scalars, a tuple of
        ``GeneratedContent`` for arrays, and a ``dict[str, GeneratedContent]``
        for structures.
    ordered_keys : tuple[str, ...]
        Property order for structures; empty otherwise.
    """

    type: ContentKind
    value: Any = None
    ordered_keys: tuple[str, ...] = ()

    @classmethod
    def null(cls) -> Kind:
        return cls(ContentKind.NULL)

    @classmethod
    def boolean(cls, value: bool) -> Kind:
        return cls(ContentKind.BOOL, bool(value))

    @classmethod
    def number(cls, value: float) -> Kind:
        return cls(ContentKind.NUMBER, float(value))

    @classmethod
    def string(cls, value: str) -> Kind:
        return cls(ContentKind.STRING, value)

    @classmethod
    def array(cls, elements: Iterable[GeneratedContent]) -> Kind:
        return cls(ContentKind.ARRAY, tuple(elements))

    @classmethod
    def structure(
        cls,
        properties: Mapping[str, GeneratedContent],
        ordered_keys: Iterable[str] | None = None,
    ) -> Kind:
        keys = tuple(properties) if ordered_keys is None else tuple(ordered_keys)
        return cls(ContentKind.STRUCTURE, dict(properties), keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Kind):
            return NotImplemented
        return (
            self.type is other.type
            and self.value == other.value
            and self.ordered_keys == other.ordered_keys
        )

    __hash__ = None  # type: ignore[assignment]


# =============================================================================
# Conversion helpers
# =============================================================================


def _as_json(obj: Any) -> JSONValue:
    """Like ``from_python`` but also accepts ``GeneratedContent`` anywhere in the tree."""
    if isinstance(obj, GeneratedContent):
        return obj._view()
    if isinstance(obj, Mapping):
        mapping = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"Property names must be str, got {type(key).__name__}",
                    code="INVALID_ARGUMENT",
                    details={"key": repr(key)},
                )
            mapping[key] = _as_json(value)
        return JSONObject(mapping, tuple(mapping))
    if isinstance(obj, (list, tuple)):
        return JSONArray(tuple(_as_json(item) for item in obj))
    return from_python(obj)


def _kind_to_json(kind: Kind) -> JSONValue:
    if kind.type is ContentKind.NULL:
        return JSON_NULL
    if kind.type is ContentKind.BOOL:
        return JSONBool(kind.value)
    if kind.type is ContentKind.NUMBER:
        return from_python(kind.value)
    if kind.type is ContentKind.STRING:
        return JSONString(kind.value)
    if kind.type is ContentKind.ARRAY:
        return JSONArray(tuple(_as_json(item) for item in kind.value))
    return JSONObject({k: _as_json(kind.value[k]) for k in kind.ordered_keys}, kind.ordered_keys)


def _view_of_partial(text: str) -> JSONValue:
    stripped = text.lstrip()
    result = extract(text)
    if result.value is not None:
        return result.value
    if stripped[:1] in ("{", "["):
        # Containers always yield a (possibly empty) container view.
        return JSONObject() if stripped[0] == "{" else JSONArray()
    # No recognisable scalar: the raw text is the content.
    return JSONString(text)


def _render(value: JSONValue) -> str:
    if isinstance(value, JSONNull):
        return "null"
    if isinstance(value, JSONBool):
        return "true" if value.value else "false"
    if isinstance(value, JSONNumber):
        return str(int(value.value)) if value.is_integral else repr(value.value)
    if isinstance(value, JSONString):
        return value.value
    if isinstance(value, JSONArray):
        return "[" + ", ".join(_render(item) for item in value) + "]"
    assert isinstance(value, JSONObject)
    members = (f"{key}: {_render(value[key])}" for key in sorted(value.ordered_keys))
    return "{" + ", ".join(members) + "}"


# =============================================================================
# GeneratedContent
# =============================================================================


class GeneratedContent:
    """
    Content produced by a generator, complete or still streaming.

    Build resolved content from Python data with ``GeneratedContent(value)``
    or the ``from_*`` constructors, and streaming content with
    :meth:`streaming` (or :class:`ContentStream`).

    Parameters
    ----------
    value : Any, optional
        ``None``, ``bool``, ``int``, ``float``, ``str``, lists/tuples,
        string-keyed mappings (insertion order is kept), a ``JSONValue`` or
        another ``GeneratedContent``.
    id : GenerationID, optional
        Identifier of the generation this content belongs to.

    Raises
    ------
    ValidationError
        If ``value`` cannot be represented as JSON.

    Examples
    --------
    >>> c = GeneratedContent({"name": "Ada", "age": 36})
    >>> c.value(int, for_property="age")
    36
    >>> c.json_string
    '{"name":"Ada","age":36}'
    """

    __slots__ = ("_root", "_partial", "_id")

    def __init__(self, value: Any = None, *, id: GenerationID | None = None) -> None:
        self._root: JSONValue | None = _as_json(value)
        self._partial: str | None = None
        self._id = id

    @classmethod
    def _from_state(
        cls, root: JSONValue | None, partial: str | None, id: GenerationID | None
    ) -> GeneratedContent:
        content = cls.__new__(cls)
        content._root = root
        content._partial = partial
        content._id = id
        return content

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def streaming(cls, text: str, id: GenerationID | None = None) -> GeneratedContent:
        """Wrap raw, possibly incomplete text accumulated from a generator."""
        if not isinstance(text, str):
            raise ValidationError(
                f"Streaming text must be str, got {type(text).__name__}",
                code="INVALID_ARGUMENT",
                details={"type": type(text).__name__},
            )
        return cls._from_state(None, text, id)

    @classmethod
    def from_json(
        cls, text: str, *, strict: bool = False, id: GenerationID | None = None
    ) -> GeneratedContent:
        """
        Build content from JSON text.

        Empty or whitespace-only text is ``null``. Text that parses as a
        complete document becomes resolved content. Otherwise the raw text
        is kept as streaming content, so whatever prefix is decodable stays
        readable (and text that is not JSON at all reads as a string).

        Parameters
        ----------
        text : str
            The JSON text.
        strict : bool, default False
            The caller asserts ``text`` is a complete document; malformed
            input raises instead of falling back.

        Raises
        ------
        InvalidJSONError
            Only with ``strict=True``, if ``text`` is not valid JSON or holds
            a number out of range for a double (``1e400``).
        """
        if not text.strip():
            return cls._from_state(JSON_NULL, None, id)
        if strict:
            return cls._from_state(parse_complete(text), None, id)
        try:
            root = parse_complete(text)
        except InvalidJSONError as e:
            log.debug("Falling back to partial extraction", extra={"reason": e.reason})
            return cls._from_state(None, text, id)
        return cls._from_state(root, None, id)

    @classmethod
    def from_properties(
        cls,
        properties: Mapping[str, Any] | Iterable[tuple[str, Any]],
        id: GenerationID | None = None,
        uniquing: Callable[[GeneratedContent, GeneratedContent], GeneratedContent] | None = None,
    ) -> GeneratedContent:
        """
        Build a structure from ``(name, value)`` pairs, keeping their order.

        Parameters
        ----------
        properties : Mapping or iterable of pairs
            Property names and values.
        uniquing : callable, optional
            ``uniquing(existing, new)`` combines the values of a repeated
            name. The name keeps its first position.

        Raises
        ------
        ValidationError
            If a name repeats and no ``uniquing`` combiner is given.
        """
        pairs = properties.items() if isinstance(properties, Mapping) else properties
        collected: dict[str, GeneratedContent] = {}
        for name, value in pairs:
            item = value if isinstance(value, GeneratedContent) else cls(value)
            if name in collected:
                if uniquing is None:
                    raise ValidationError(
                        f"Duplicate property {name!r}",
                        code="INVALID_ARGUMENT",
                        details={"property": name},
                    )
                item = uniquing(collected[name], item)
            collected[name] = item
        return cls(collected, id=id)

    @classmethod
    def from_elements(cls, elements: Iterable[Any], id: GenerationID | None = None) -> GeneratedContent:
        """Build an array from any iterable of values."""
        return cls(list(elements), id=id)

    @classmethod
    def from_kind(cls, kind: Kind, id: GenerationID | None = None) -> GeneratedContent:
        """Build resolved content from a :class:`Kind` view."""
        return cls._from_state(_kind_to_json(kind), None, id)

    def with_id(self, id: GenerationID | None) -> GeneratedContent:
        """Return a copy carrying ``id``."""
        return self._from_state(self._root, self._partial, id)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def _view(self) -> JSONValue:
        if self._root is not None:
            return self._root
        assert self._partial is not None
        return _view_of_partial(self._partial)

    @property
    def id(self) -> GenerationID | None:
        """Identifier of the generation, if any."""
        return self._id

    @property
    def is_streaming(self) -> bool:
        """True when this content wraps raw streaming text."""
        return self._partial is not None

    @property
    def raw(self) -> str | None:
        """The raw streaming text, or None for resolved content."""
        return self._partial

    @property
    def is_complete(self) -> bool:
        """
        Whether the content is complete.

        Always True for resolved content. For streaming content, True iff
        every bracket and string in the raw text is closed. Recomputed on
        each access.
        """
        if self._partial is None:
            return True
        return is_balanced(self._partial)

    @property
    def kind(self) -> Kind:
        """Typed view of the current content."""
        value = self._view()
        kind_type = _KIND_OF_VALUE[type(value)]
        if kind_type is ContentKind.NULL:
            return Kind.null()
        if kind_type is ContentKind.ARRAY:
            return Kind.array(self._wrap(item) for item in value)  # type: ignore[attr-defined]
        if kind_type is ContentKind.STRUCTURE:
            assert isinstance(value, JSONObject)
            return Kind.structure(
                {key: self._wrap(item) for key, item in value.items()}, value.ordered_keys
            )
        return Kind(kind_type, value.value)  # type: ignore[attr-defined]

    def _wrap(self, value: JSONValue) -> GeneratedContent:
        return self._from_state(value, None, self._id)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def properties(self) -> dict[str, GeneratedContent]:
        """
        Property name to content, in generation order.

        Raises
        ------
        DictionaryExpectedError
            If the content is not a structure.
        """
        value = self._view()
        if not isinstance(value, JSONObject):
            raise DictionaryExpectedError(_KIND_OF_VALUE[type(value)].value)
        return {key: self._wrap(item) for key, item in value.items()}

    def elements(self) -> list[GeneratedContent]:
        """
        Array elements, in order.

        Raises
        ------
        ArrayExpectedError
            If the content is not an array.
        """
        value = self._view()
        if not isinstance(value, JSONArray):
            raise ArrayExpectedError(_KIND_OF_VALUE[type(value)].value)
        return [self._wrap(item) for item in value]

    @overload
    def value(self, tp: type[T], *, for_property: str | None = ..., optional: bool = ...) -> T: ...

    @overload
    def value(self, tp: Any, *, for_property: str | None = ..., optional: bool = ...) -> Any: ...

    def value(self, tp: Any, *, for_property: str | None = None, optional: bool = False) -> Any:
        """
        Read the content (or one of its properties) as a Python type.

        Coercions:

        - ``null``: ``None`` only when ``optional=True`` or ``tp`` is
          ``type(None)``
        - ``bool``: to ``bool``
        - ``number``: to ``float``, or ``int`` when integral
        - ``string``: to ``str``; to ``bool`` for exactly ``"true"`` /
          ``"false"``; to ``int``/``float`` when the text is a JSON number
        - ``array``/``structure``: to ``list``/``dict`` of plain data

        ``tp=GeneratedContent`` returns the content node itself.

        Parameters
        ----------
        tp : type
            One of ``bool``, ``int``, ``float``, ``str``, ``list``, ``dict``,
            ``type(None)`` or ``GeneratedContent``.
        for_property : str, optional
            Read this property of a structure instead of the content itself.
        optional : bool, default False
            Return ``None`` for ``null`` content or an absent property.

        Raises
        ------
        MissingPropertyError
            If ``for_property`` is absent (or not generated yet) and
            ``optional`` is False.
        DictionaryExpectedError
            If ``for_property`` is given and the content is not a structure.
        TypeMismatchError
            If the content cannot be read as ``tp``.
        """
        if for_property is not None:
            properties = self.properties()
            if for_property not in properties:
                if optional:
                    return None
                raise MissingPropertyError(for_property)
            return properties[for_property].value(tp, optional=optional)

        if tp is GeneratedContent:
            return self

        value = self._view()
        expected = getattr(tp, "__name__", repr(tp))
        actual = _KIND_OF_VALUE[type(value)].value

        if isinstance(value, JSONNull):
            if optional or tp is type(None):
                return None
            raise TypeMismatchError(expected, actual)

        if tp is bool:
            if isinstance(value, JSONBool):
                return value.value
            if isinstance(value, JSONString) and value.value in ("true", "false"):
                return value.value == "true"
        elif tp is int:
            # Any whole double converts, including ones beyond 2**53.
            if isinstance(value, JSONNumber) and value.value.is_integer():
                return int(value.value)
            if isinstance(value, JSONString) and _INT_RE.match(value.value):
                return int(value.value)
        elif tp is float:
            if isinstance(value, JSONNumber):
                return value.value
            if isinstance(value, JSONString) and _FLOAT_RE.match(value.value):
                return float(value.value)
        elif tp is str:
            if isinstance(value, JSONString):
                return value.value
        elif tp is list:
            if isinstance(value, JSONArray):
                return to_python(value)
        elif tp is dict:
            if isinstance(value, JSONObject):
                return to_python(value)

        raise TypeMismatchError(expected, actual)

    def to_python(self) -> Any:
        """Plain Python data for the current content."""
        return to_python(self._view())

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    @property
    def json_string(self) -> str:
        """
        JSON text for the content.

        Canonical (compact, generation-ordered) JSON for resolved content
        and for streaming text that has become a valid document; the raw
        text verbatim while still partial.
        """
        if self._partial is None:
            assert self._root is not None
            return dumps(self._root)
        if is_balanced(self._partial):
            try:
                return dumps(parse_complete(self._partial))
            except InvalidJSONError:
                pass
        return self._partial

    @property
    def text(self) -> str:
        """Human-readable rendering of the current content."""
        return _render(self._view())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneratedContent):
            return NotImplemented
        return self._view() == other._view() and self.is_complete == other.is_complete

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._partial is not None and not self.is_complete:
            return f"GeneratedContent(partial={self._partial!r})"
        return f"GeneratedContent({self.json_string})"
