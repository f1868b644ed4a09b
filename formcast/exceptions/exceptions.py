"""
Formcast exceptions.

This module defines the exception hierarchy for formcast:

    FormcastError (base)
    ├── ContentError - Errors reading generated content
    │   ├── TypeMismatchError - Content kind cannot be coerced to the requested type
    │   ├── MissingPropertyError - Structure has no such property
    │   ├── InvalidJSONError - Text asserted complete is not valid JSON
    │   ├── ArrayExpectedError - Elements requested from non-array content
    │   └── DictionaryExpectedError - Properties requested from non-structure content
    ├── SchemaError - Errors resolving a dynamic schema graph
    │   ├── UndefinedReferenceError - Reference to a name not in the dependency set
    │   ├── CircularReferenceError - Reference cycle between named schemas
    │   ├── EmptyTypeChoicesError - anyOf schema without alternatives
    │   ├── DuplicatePropertyError - Two sibling properties share a name
    │   ├── DuplicateTypeError - Two named schemas share a name
    │   └── SchemaDepthError - Resolution exceeded the configured depth limit
    └── ValidationError - Invalid parameter value

Usage:
    try:
        age = content.value(int, for_property="age")
    except formcast.MissingPropertyError:
        age = None
    except formcast.ContentError as e:
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")

Content errors are always raised as typed errors for the caller to handle.
Schema errors are raised synchronously when a schema is resolved, never
deferred to later content access.
"""

from typing import Any

__all__ = [
    # Base
    "FormcastError",
    # Content
    "ContentError",
    "TypeMismatchError",
    "MissingPropertyError",
    "InvalidJSONError",
    "ArrayExpectedError",
    "DictionaryExpectedError",
    # Schema
    "SchemaError",
    "UndefinedReferenceError",
    "CircularReferenceError",
    "EmptyTypeChoicesError",
    "DuplicatePropertyError",
    "DuplicateTypeError",
    "SchemaDepthError",
    # Validation
    "ValidationError",
]


class FormcastError(Exception):
    """
    Base exception for all formcast errors.

    All formcast-specific exceptions inherit from this class, enabling:
    - Catch-all handling: ``except formcast.FormcastError``
    - Stable string-based error codes for programmatic handling
    - Structured details for debugging and logging

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "CIRCULAR_REFERENCE").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"name": "Person", "path": [...]}).
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Content Errors
# =============================================================================


class ContentError(FormcastError):
    """Base class for errors raised while reading generated content."""

    def __init__(
        self,
        message: str,
        code: str = "CONTENT_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class TypeMismatchError(ContentError, TypeError):
    """
    Content cannot be read as the requested type.

    Raised by ``GeneratedContent.value()`` when the content's kind has no
    documented coercion to the requested Python type.

    Attributes
    ----------
    expected : str
        Name of the requested type (e.g., "int").
    actual : str
        Kind of the content that was found (e.g., "string").
    """

    def __init__(self, expected: str, actual: str, code: str = "TYPE_MISMATCH"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Type mismatch: expected {expected}, found {actual}",
            code,
            {"expected": expected, "actual": actual},
        )


class MissingPropertyError(ContentError, KeyError):
    """
    Structure has no property with the requested name.

    For streaming content this also covers properties that have not been
    generated yet.
    """

    def __init__(self, name: str, code: str = "MISSING_PROPERTY"):
        self.name = name
        super().__init__(f"Missing property: {name!r}", code, {"name": name})

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return self.message


class InvalidJSONError(ContentError, ValueError):
    """
    Text asserted to be a complete JSON document failed to parse.

    Only raised in strict construction (``GeneratedContent.from_json(text,
    strict=True)``). Lenient construction never raises for malformed input.

    Attributes
    ----------
    reason : str
        Parser diagnostic, including the failing position when known.
    """

    def __init__(self, reason: str, code: str = "INVALID_JSON"):
        self.reason = reason
        super().__init__(f"Invalid JSON: {reason}", code, {"reason": reason})


class ArrayExpectedError(ContentError, TypeError):
    """Elements were requested from content that is not an array."""

    def __init__(self, actual: str = "", code: str = "ARRAY_EXPECTED"):
        self.actual = actual
        message = "Array expected" + (f", found {actual}" if actual else "")
        super().__init__(message, code, {"actual": actual})


class DictionaryExpectedError(ContentError, TypeError):
    """Properties were requested from content that is not a structure."""

    def __init__(self, actual: str = "", code: str = "DICTIONARY_EXPECTED"):
        self.actual = actual
        message = "Dictionary expected" + (f", found {actual}" if actual else "")
        super().__init__(message, code, {"actual": actual})


# =============================================================================
# Schema Errors
# =============================================================================


class SchemaError(FormcastError):
    """Base class for errors raised while resolving a dynamic schema graph."""

    def __init__(
        self,
        message: str,
        code: str = "SCHEMA_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class UndefinedReferenceError(SchemaError):
    """
    A reference names a schema that is not in the dependency set.

    Fix by passing the referenced schema as a dependency when building the
    ``GenerationSchema``.
    """

    def __init__(self, name: str, schema: str | None = None, code: str = "UNDEFINED_REFERENCE"):
        self.name = name
        self.schema = schema
        where = f" in schema {schema!r}" if schema else ""
        super().__init__(
            f"Undefined reference {name!r}{where}",
            code,
            {"name": name, "schema": schema},
        )


class CircularReferenceError(SchemaError):
    """
    Following references leads back to a schema already being expanded.

    Resolved schemas are acyclic by construction, so a reference cycle
    (direct or through any ``anyOf`` branch) is rejected.

    Attributes
    ----------
    name : str
        The reference that closed the cycle.
    path : list[str]
        Names being expanded when the cycle was found, outermost first.
    """

    def __init__(
        self,
        name: str,
        path: list[str] | None = None,
        code: str = "CIRCULAR_REFERENCE",
    ):
        self.name = name
        self.path = list(path or [])
        chain = " -> ".join([*self.path, name]) if self.path else name
        super().__init__(
            f"Circular reference to {name!r}: {chain}",
            code,
            {"name": name, "path": self.path},
        )


class EmptyTypeChoicesError(SchemaError):
    """An anyOf schema was given no alternatives."""

    def __init__(self, schema: str, code: str = "EMPTY_TYPE_CHOICES"):
        self.schema = schema
        super().__init__(
            f"Empty type choices in anyOf schema {schema!r}",
            code,
            {"schema": schema},
        )


class DuplicatePropertyError(SchemaError):
    """Two properties of the same object schema share a name."""

    def __init__(self, schema: str, property: str, code: str = "DUPLICATE_PROPERTY"):
        self.schema = schema
        self.property = property
        super().__init__(
            f"Duplicate property {property!r} in schema {schema!r}",
            code,
            {"schema": schema, "property": property},
        )


class DuplicateTypeError(SchemaError):
    """Two independently named schemas in the dependency set share a name."""

    def __init__(self, schema: str | None, type: str, code: str = "DUPLICATE_TYPE"):
        self.schema = schema
        self.type = type
        where = f" in schema {schema!r}" if schema else ""
        super().__init__(
            f"Duplicate type {type!r}{where}",
            code,
            {"schema": schema, "type": type},
        )


class SchemaDepthError(SchemaError):
    """Resolution nested deeper than ``formcast.config.max_schema_depth``."""

    def __init__(self, depth: int, limit: int, code: str = "SCHEMA_DEPTH_EXCEEDED"):
        self.depth = depth
        self.limit = limit
        super().__init__(
            f"Schema nesting exceeds {limit} levels; consider simplifying the schema.",
            code,
            {"depth": depth, "limit": limit},
        )


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(FormcastError, ValueError):
    """
    Invalid parameter value.

    Raised when a function receives an argument of the correct type
    but an inappropriate value (e.g., a negative count guide).

    This exception inherits from both FormcastError and ValueError, so both work::

        except formcast.FormcastError:   # catches all formcast errors
        except ValueError:               # catches validation errors (Pythonic)
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_ARGUMENT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
