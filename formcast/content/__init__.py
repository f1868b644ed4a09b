"""
Generated content: the canonical value model, partial extraction and the
content node wrapping complete or streaming generator output.
"""

from .extract import Extraction, extract, is_balanced, parse_complete, scan_number, scan_string
from .generated import ContentKind, GeneratedContent, GenerationID, Kind
from .stream import ContentStream
from .value import (
    JSON_NULL,
    JSONArray,
    JSONBool,
    JSONNull,
    JSONNumber,
    JSONObject,
    JSONString,
    JSONValue,
    ValueKind,
    dumps,
    from_python,
    to_python,
)

__all__ = [
    # Content
    "GeneratedContent",
    "GenerationID",
    "Kind",
    "ContentKind",
    "ContentStream",
    # Extraction
    "Extraction",
    "extract",
    "is_balanced",
    "parse_complete",
    "scan_number",
    "scan_string",
    # Values
    "JSONValue",
    "JSONNull",
    "JSONBool",
    "JSONNumber",
    "JSONString",
    "JSONArray",
    "JSONObject",
    "JSON_NULL",
    "ValueKind",
    "from_python",
    "to_python",
    "dumps",
]
