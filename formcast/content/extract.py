"""
Partial JSON extraction.

Turns a text buffer that may be a truncated prefix of a JSON document (as
produced token by token by a streaming text generator) into the longest
safely decodable ``JSONValue`` plus a completeness flag.

Guarantees:
- Lenient extraction never raises on partial or malformed input. When no
  value can be found, ``Extraction.value`` is ``None`` and the caller picks
  a fallback.
- Monotonic: for a prefix ``p1`` of ``p2`` (both prefixes of a document),
  every member, element or container that was terminated in the result for
  ``p1`` is present and identical in the result for ``p2``. Only values
  still open at the end of ``p1`` (a string without its closing quote, a
  number that may gain digits) can change.
- Deterministic: extracting the same buffer twice gives equal results.

Only :func:`parse_complete` is strict; it is used when the caller asserts
the buffer is a complete document, and raises ``InvalidJSONError``.

Example:
    >>> extract('{"title": "A story of').value
    JSONObject(mapping={'title': JSONString(value='A story of')}, ordered_keys=('title',))
    >>> scan_number("3.")
    (3.0, 1)
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, NoReturn

from .._logging import scoped_logger
from ..exceptions import InvalidJSONError
from .value import (
    JSON_NULL,
    JSONArray,
    JSONBool,
    JSONNumber,
    JSONObject,
    JSONString,
    JSONValue,
    from_python,
)

__all__ = [
    "Extraction",
    "extract",
    "extract_object",
    "extract_array",
    "scan_string",
    "scan_number",
    "skip_balanced",
    "is_balanced",
    "parse_complete",
    "MAX_NESTING",
]

log = scoped_logger("extract")

# Deepest container nesting the lenient scanner follows; anything deeper is
# treated as "no value" instead of exhausting the interpreter stack.
MAX_NESTING = 256

_WHITESPACE = " \t\n\r"
_DIGITS = "0123456789"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_LITERALS: dict[str, tuple[str, JSONValue]] = {
    "t": ("true", JSONBool(True)),
    "f": ("false", JSONBool(False)),
    "n": ("null", JSON_NULL),
}


@dataclass(frozen=True)
class Extraction:
    """
    Result of scanning a (possibly partial) buffer.

    Attributes
    ----------
    value : JSONValue | None
        The longest safely decodable value, or None when the buffer holds
        no recognisable value at the scan position.
    complete : bool
        True when the value's own token boundary was reached: closing
        bracket for containers, closing quote for strings, the last letter
        for literals, a following non-numeric character for numbers.
    end : int
        Index just past the consumed span.
    """

    value: JSONValue | None
    complete: bool
    end: int


_NOTHING = None


# =============================================================================
# Cursor helpers
# =============================================================================


def _skip_ws(s: str, i: int) -> int:
    n = len(s)
    while i < n and s[i] in _WHITESPACE:
        i += 1
    return i


def _peek(s: str, i: int) -> str:
    return s[i] if i < len(s) else ""


# =============================================================================
# Scalars
# =============================================================================


def scan_string(s: str, start: int, allow_partial: bool = True) -> tuple[str | None, int, bool]:
    """
    Scan a JSON string whose opening quote is at ``s[start]``.

    Implements the full string grammar: simple escapes, ``\\uXXXX`` and
    UTF-16 surrogate pairs.

    Returns
    -------
    tuple[str | None, int, bool]
        ``(text, end, closed)``. ``closed`` is True when the closing quote
        was consumed. When the buffer ends inside the string (or inside an
        escape, a ``\\uXXXX`` or a surrogate pair) or an escape is invalid,
        ``allow_partial`` returns the longest decoded prefix with
        ``closed=False``; without it ``text`` is None.
    """
    if _peek(s, start) != '"':
        return None, start, False

    n = len(s)
    i = start + 1
    out: list[str] = []

    def stop(at: int) -> tuple[str | None, int, bool]:
        return ("".join(out) if allow_partial else None), at, False

    while i < n:
        c = s[i]
        if c == '"':
            return "".join(out), i + 1, True
        if c != "\\":
            out.append(c)
            i += 1
            continue

        escape_at = i
        if i + 1 >= n:
            return stop(escape_at)
        e = s[i + 1]
        if e in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[e])
            i += 2
            continue
        if e != "u":
            return stop(escape_at)

        code = _read_hex4(s, i + 2)
        if code is None:
            return stop(escape_at)
        i += 6

        if 0xD800 <= code <= 0xDBFF:
            # High surrogate: the low half must follow as another \uXXXX.
            if s[i : i + 2] != "\\u":
                return stop(escape_at)
            low = _read_hex4(s, i + 2)
            if low is None or not 0xDC00 <= low <= 0xDFFF:
                return stop(escape_at)
            out.append(chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)))
            i += 6
        elif 0xDC00 <= code <= 0xDFFF:
            # Lone low surrogate
            return stop(escape_at)
        else:
            out.append(chr(code))

    return stop(n)


def _read_hex4(s: str, i: int) -> int | None:
    digits = s[i : i + 4]
    if len(digits) != 4 or not all(d in _HEX_DIGITS for d in digits):
        return None
    return int(digits, 16)


def scan_number(s: str, start: int = 0) -> tuple[float, int] | None:
    """
    Scan a JSON number at ``s[start]``, rolling back to a safe prefix.

    Consumes an optional minus sign, the integer part, an optional fraction
    and an optional exponent. When the buffer cuts off after a ``.`` or an
    ``e`` (with or without its sign) the scan rolls back to the last
    syntactically complete numeric prefix.

    Returns
    -------
    tuple[float, int] | None
        ``(value, end)`` where ``end`` is the index just past the consumed
        prefix, or None when no digit follows the optional sign.

    Examples
    --------
    >>> scan_number("3.")
    (3.0, 1)
    >>> scan_number("-12.5e")
    (-12.5, 5)
    """
    n = len(s)
    i = start
    if i < n and s[i] == "-":
        i += 1
    if i >= n or s[i] not in _DIGITS:
        return None

    if s[i] == "0":
        i += 1
    else:
        while i < n and s[i] in _DIGITS:
            i += 1
    last_valid = i

    if i < n and s[i] == ".":
        if i + 1 >= n or s[i + 1] not in _DIGITS:
            return float(s[start:last_valid]), last_valid
        i += 1
        while i < n and s[i] in _DIGITS:
            i += 1
        last_valid = i

    if i < n and s[i] in "eE":
        j = i + 1
        if j < n and s[j] in "+-":
            j += 1
        if j >= n or s[j] not in _DIGITS:
            return float(s[start:last_valid]), last_valid
        while j < n and s[j] in _DIGITS:
            j += 1
        last_valid = j

    try:
        value = float(s[start:last_valid])
    except OverflowError:
        return None
    return value, last_valid


def _scan_literal(s: str, i: int) -> tuple[JSONValue, int] | None:
    literal = _LITERALS.get(_peek(s, i))
    if literal is None:
        return None
    text, value = literal
    if s.startswith(text, i):
        return value, i + len(text)
    return None


# =============================================================================
# Balance scan
# =============================================================================


def skip_balanced(s: str, start: int, open_ch: str, close_ch: str) -> int:
    """
    Advance over the container opening at ``s[start]``.

    String- and escape-aware: brackets inside string literals are ignored.

    Returns
    -------
    int
        Index just past the matching closing bracket, or ``len(s)`` when
        the container is still open at the end of the buffer.
    """
    depth = 0
    in_string = False
    escape = False
    i = start
    n = len(s)
    while i < n:
        c = s[i]
        i += 1
        if in_string:
            if escape:
                escape = False
            elif c == "\\":
                escape = True
            elif c == '"':
                in_string = False
            continue
        if c == '"':
            in_string = True
        elif c == open_ch:
            depth += 1
        elif c == close_ch:
            depth -= 1
            if depth == 0:
                return i
    return n


def is_balanced(text: str) -> bool:
    """
    Completeness check for raw streaming text.

    True iff every ``{``/``[`` is closed by its matching bracket, no string
    literal is left open, and the text holds something other than
    whitespace. A mismatched closing bracket makes the text incomplete.
    """
    if not text.strip():
        return False
    stack: list[str] = []
    in_string = False
    escape = False
    for c in text:
        if in_string:
            if escape:
                escape = False
            elif c == "\\":
                escape = True
            elif c == '"':
                in_string = False
            continue
        if c == '"':
            in_string = True
        elif c in "{[":
            stack.append(c)
        elif c == "}":
            if not stack or stack[-1] != "{":
                return False
            stack.pop()
        elif c == "]":
            if not stack or stack[-1] != "[":
                return False
            stack.pop()
    return not stack and not in_string


# =============================================================================
# Values and containers
# =============================================================================


def _scan_value(s: str, i: int, depth: int) -> Extraction:
    i = _skip_ws(s, i)
    c = _peek(s, i)

    if c == '"':
        text, end, closed = scan_string(s, i, allow_partial=True)
        return Extraction(JSONString(text or ""), closed, end)

    if c == "-" or (c and c in _DIGITS):
        scanned = scan_number(s, i)
        if scanned is None:
            return Extraction(_NOTHING, False, i)
        number, end = scanned
        # A number is terminated once something other than a numeric
        # character follows it.
        complete = end < len(s) and s[end] not in "0123456789.eE+-"
        return Extraction(JSONNumber(number), complete, end)

    if c in _LITERALS:
        literal = _scan_literal(s, i)
        if literal is None:
            return Extraction(_NOTHING, False, i)
        value, end = literal
        return Extraction(value, True, end)

    if c in ("{", "["):
        if depth >= MAX_NESTING:
            log.debug("Nesting limit reached", extra={"position": i, "limit": MAX_NESTING})
            return Extraction(_NOTHING, False, i)
        close_ch = "}" if c == "{" else "]"
        # Two passes over the same span: a fresh extraction for the value,
        # and an independent balance scan for the outer cursor.
        if c == "{":
            nested = _extract_object(s, i, depth + 1)
        else:
            nested = _extract_array(s, i, depth + 1)
        end = skip_balanced(s, i, c, close_ch)
        if nested.complete and nested.end != end:
            log.debug(
                "Nested span disagreement",
                extra={"position": i, "value_end": nested.end, "cursor_end": end},
            )
        return Extraction(nested.value, nested.complete, end)

    return Extraction(_NOTHING, False, i)


def _extract_object(s: str, start: int, depth: int) -> Extraction:
    i = _skip_ws(s, start)
    if _peek(s, i) != "{":
        return Extraction(_NOTHING, False, i)
    i += 1

    mapping: dict[str, JSONValue] = {}
    order: list[str] = []

    def result(complete: bool, end: int) -> Extraction:
        return Extraction(JSONObject(mapping, tuple(order)), complete, end)

    i = _skip_ws(s, i)
    if _peek(s, i) == "}":
        return result(True, i + 1)

    while i < len(s):
        i = _skip_ws(s, i)
        # Member keys need their closing quote: no partial keys.
        key, after_key, closed = scan_string(s, i, allow_partial=False)
        if key is None or not closed:
            break
        i = _skip_ws(s, after_key)
        if _peek(s, i) != ":":
            break
        i = _skip_ws(s, i + 1)

        member = _scan_value(s, i, depth)
        if member.value is None:
            break
        # A repeated key never replaces a member that already terminated.
        if key not in mapping:
            order.append(key)
            mapping[key] = member.value
        i = _skip_ws(s, member.end)

        c = _peek(s, i)
        if c == ",":
            i += 1
            continue
        if c == "}":
            return result(True, i + 1)
        break

    return result(False, i)


def _extract_array(s: str, start: int, depth: int) -> Extraction:
    i = _skip_ws(s, start)
    if _peek(s, i) != "[":
        return Extraction(_NOTHING, False, i)
    i += 1

    elements: list[JSONValue] = []

    i = _skip_ws(s, i)
    if _peek(s, i) == "]":
        return Extraction(JSONArray(()), True, i + 1)

    while i < len(s):
        element = _scan_value(s, i, depth)
        if element.value is None:
            break
        elements.append(element.value)
        i = _skip_ws(s, element.end)

        c = _peek(s, i)
        if c == ",":
            i += 1
            continue
        if c == "]":
            return Extraction(JSONArray(tuple(elements)), True, i + 1)
        break

    return Extraction(JSONArray(tuple(elements)), False, i)


def extract_object(text: str, start: int = 0) -> Extraction:
    """Extract the object opening at the first non-whitespace character from ``start``."""
    return _extract_object(text, start, 1)


def extract_array(text: str, start: int = 0) -> Extraction:
    """Extract the array opening at the first non-whitespace character from ``start``."""
    return _extract_array(text, start, 1)


def extract(text: str) -> Extraction:
    """
    Extract the longest safely decodable value from a buffer.

    Dispatches on the first non-whitespace character: ``"`` string,
    ``-``/digit number, ``t``/``f``/``n`` literal, ``{`` object, ``[``
    array. Anything else (including an empty buffer or a literal that is
    not fully spelled out yet) yields ``value=None``.

    Never raises.

    Parameters
    ----------
    text : str
        The text accumulated so far.

    Returns
    -------
    Extraction
        The value, its completeness and the consumed index.
    """
    i = _skip_ws(text, 0)
    c = _peek(text, i)
    if c == "{":
        return _extract_object(text, i, 1)
    if c == "[":
        return _extract_array(text, i, 1)
    return _scan_value(text, i, 0)


# =============================================================================
# Strict parsing
# =============================================================================


def _reject_constant(name: str) -> NoReturn:
    raise ValueError(f"{name} is not valid JSON")


def _parse_double(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"Number {text} is out of range for a double")
    return number


def _first_value_wins(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    members: dict[str, Any] = {}
    for key, value in pairs:
        members.setdefault(key, value)
    return members


def parse_complete(text: str) -> JSONValue:
    """
    Parse a buffer the caller asserts is a complete JSON document.

    Object member order is preserved; a repeated key keeps its first
    position and its first value. Numbers are read as doubles, so a
    grammatically valid number beyond the double range (``1e400``, or an
    integer with more than 308 digits) is rejected rather than becoming
    infinity.

    Raises
    ------
    InvalidJSONError
        If the text is not exactly one valid JSON document, or holds a
        number out of range for a double.
    """
    try:
        data = json.loads(
            text,
            parse_constant=_reject_constant,
            parse_float=_parse_double,
            parse_int=_parse_double,
            object_pairs_hook=_first_value_wins,
        )
        return from_python(data)
    except json.JSONDecodeError as e:
        raise InvalidJSONError(f"{e.msg} at line {e.lineno} column {e.colno}") from e
    except (ValueError, RecursionError) as e:
        raise InvalidJSONError(str(e) or type(e).__name__) from e
