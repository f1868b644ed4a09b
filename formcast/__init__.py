"""
Formcast - structured generation output for Python.

Formcast reads JSON-shaped text from a streaming text generator as it
arrives, and describes the shape that text must have.

Quick Start
-----------

Read partial output while it streams:

    >>> import formcast
    >>> content = formcast.GeneratedContent.streaming('{"title": "A story of')
    >>> content.value(str, for_property="title")
    'A story of'
    >>> content.is_complete
    False

Feed chunks as they arrive:

    >>> stream = formcast.ContentStream()
    >>> for chunk in ['{"title": "A st', 'ory of love"}']:
    ...     snapshot = stream.feed(chunk)
    >>> snapshot.is_complete
    True

Describe the expected shape:

    >>> from dataclasses import dataclass, field
    >>> from formcast.schema.guides import Range
    >>>
    >>> @dataclass
    ... class Review:
    ...     title: str
    ...     stars: int = field(metadata={"guides": [Range(1, 5)]})
    >>>
    >>> schema = formcast.generation_schema_for(Review)
    >>> schema.to_schema_dict()["properties"]["stars"]
    {'type': 'integer', 'minimum': 1, 'maximum': 5}

Bind the result back to Python:

    >>> formcast.hydrate(Review, formcast.GeneratedContent.from_json('{"title": "Ok", "stars": 4}'))
    Review(title='Ok', stars=4)


Core Classes
------------

Content:
- `GeneratedContent` - Complete or streaming generator output
- `ContentStream` - Accumulates chunks into content snapshots

Schemas:
- `GenerationSchema` - Root schema resolved against its dependencies
- `ObjectSchema`, `ArraySchema`, `ReferenceSchema`, `AnyOfSchema`,
  `PrimitiveSchema` - Dynamic schema nodes (see `formcast.schema`)

Logging
-------

    FORMCAST_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: warn)
    FORMCAST_LOG_FORMAT=json|human
"""

from formcast._logging import _NAME_TO_LEVEL, logger, setup_logging
from formcast._version import __version__ as __version__

# Binding
from formcast.binding import hydrate, to_content

# Configuration
from formcast.config import config

# Content
from formcast.content import ContentKind, ContentStream, GeneratedContent, GenerationID, Kind

# Exceptions
from formcast.exceptions import (
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

# Prompt
from formcast.prompt import schema_to_prompt

# Schema
from formcast.schema import (
    AnyOfSchema,
    ArraySchema,
    GenerationSchema,
    ObjectSchema,
    PrimitiveSchema,
    ReferenceSchema,
    SchemaProperty,
    check_conformance,
    generation_schema_for,
    schema_for,
)


def set_log_level(level: str) -> None:
    """Set logging verbosity level.

    Args:
        level: One of 'trace', 'debug', 'info', 'warn', 'error', 'fatal', 'off'.
               Default is 'warn' (silent operation).

    Raises:
        ValidationError: If ``level`` is not a known level name.

    Example:
        >>> import formcast
        >>> formcast.set_log_level('debug')  # Enable debug output
        >>> formcast.set_log_level('warn')   # Back to silent (default)
    """
    level_int = _NAME_TO_LEVEL.get(level.lower())
    if level_int is None:
        raise ValidationError(
            f"Unknown log level: {level}. Valid options: {list(_NAME_TO_LEVEL)}",
            code="INVALID_ARGUMENT",
            details={"param": "level", "value": level},
        )
    logger.setLevel(level_int)


def set_log_format(fmt: str) -> None:
    """Set logging output format.

    Args:
        fmt: Either 'json' (machine-readable) or 'human' (readable).

    Raises:
        ValidationError: If ``fmt`` is not 'json' or 'human'.

    Example:
        >>> import formcast
        >>> formcast.set_log_format('human')  # Pretty output
        >>> formcast.set_log_format('json')   # Structured JSON
    """
    if fmt.lower() not in ("json", "human"):
        raise ValidationError(
            f"Unknown log format: {fmt}. Valid options: ['json', 'human']",
            code="INVALID_ARGUMENT",
            details={"param": "format", "value": fmt},
        )
    setup_logging(logger.level, format=fmt.lower())


# =============================================================================
# Public API
# =============================================================================
#
# Grouped by section; other symbols remain importable via submodules
# (e.g., from formcast.schema.guides import Range).
#
__all__ = [
    # Content
    "GeneratedContent",
    "GenerationID",
    "Kind",
    "ContentKind",
    "ContentStream",
    # Schema
    "GenerationSchema",
    "ObjectSchema",
    "ArraySchema",
    "ReferenceSchema",
    "AnyOfSchema",
    "PrimitiveSchema",
    "SchemaProperty",
    "schema_for",
    "generation_schema_for",
    "check_conformance",
    # Binding
    "hydrate",
    "to_content",
    # Prompt
    "schema_to_prompt",
    # Configuration
    "config",
    "set_log_level",
    "set_log_format",
    "setup_logging",
    # Exceptions
    "FormcastError",
    "ContentError",
    "TypeMismatchError",
    "MissingPropertyError",
    "InvalidJSONError",
    "ArrayExpectedError",
    "DictionaryExpectedError",
    "SchemaError",
    "UndefinedReferenceError",
    "CircularReferenceError",
    "EmptyTypeChoicesError",
    "DuplicatePropertyError",
    "DuplicateTypeError",
    "SchemaDepthError",
    "ValidationError",
]
