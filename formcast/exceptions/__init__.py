"""
Formcast exceptions.

This module defines the exception hierarchy for formcast:

    FormcastError (base)
    ├── ContentError - Errors reading generated content
    │   ├── TypeMismatchError
    │   ├── MissingPropertyError
    │   ├── InvalidJSONError
    │   ├── ArrayExpectedError
    │   └── DictionaryExpectedError
    ├── SchemaError - Errors resolving a dynamic schema graph
    │   ├── UndefinedReferenceError
    │   ├── CircularReferenceError
    │   ├── EmptyTypeChoicesError
    │   ├── DuplicatePropertyError
    │   ├── DuplicateTypeError
    │   └── SchemaDepthError
    └── ValidationError - Invalid parameter value
"""

from .exceptions import (
    ArrayExpectedError,
    CircularReferenceError,
    ContentError,
    DictionaryExpectedError,
    DuplicatePropertyError,
    DuplicateTypeError,
    EmptyTypeChoicesError,
    FormcastError,
    InvalidJSONError,
    MissingPropertyError,
    SchemaDepthError,
    SchemaError,
    TypeMismatchError,
    UndefinedReferenceError,
    ValidationError,
)

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
