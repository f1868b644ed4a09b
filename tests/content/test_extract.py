"""
Tests for formcast.content.extract - partial JSON extraction.

Covers the scalar scanners, the balance scan, lenient extraction of
truncated documents and strict parsing.
"""

import pytest

from formcast.content.extract import (
    MAX_NESTING,
    Extraction,
    extract,
    extract_array,
    extract_object,
    is_balanced,
    parse_complete,
    scan_number,
    scan_string,
    skip_balanced,
)
from formcast.content.value import (
    JSON_NULL,
    JSONArray,
    JSONBool,
    JSONNumber,
    JSONObject,
    JSONString,
    from_python,
)
from formcast.exceptions import InvalidJSONError
from tests.documents import DOCUMENTS, prefixes


def _stable(earlier, later) -> bool:
    """Whether ``later`` extends ``earlier`` without changing terminated parts."""
    if earlier is None:
        return True
    if isinstance(earlier, JSONObject):
        if not isinstance(later, JSONObject):
            return False
        keys = earlier.ordered_keys
        if later.ordered_keys[: len(keys)] != keys:
            return False
        if any(earlier[k] != later[k] for k in keys[:-1]):
            return False
        return not keys or _stable(earlier[keys[-1]], later[keys[-1]])
    if isinstance(earlier, JSONArray):
        if not isinstance(later, JSONArray):
            return False
        items = earlier.elements
        if not items:
            return True
        n = len(items)
        if len(later) < n or later.elements[: n - 1] != items[:-1]:
            return False
        return _stable(items[-1], later.elements[n - 1])
    if isinstance(earlier, JSONString):
        return isinstance(later, JSONString) and later.value.startswith(earlier.value)
    if isinstance(earlier, JSONNumber):
        # Digits may still be appended
        return isinstance(later, JSONNumber)
    return earlier == later


# =============================================================================
# scan_string()
# =============================================================================


class TestScanString:
    """Tests for the string scanner."""

    def test_closed_string(self):
        """A closed string reports its end past the closing quote."""
        assert scan_string('"abc" rest', 0) == ("abc", 5, True)

    def test_not_at_quote(self):
        """Scanning where no quote starts yields nothing."""
        assert scan_string("abc", 0) == (None, 0, False)

    def test_truncated_string(self):
        """An open string returns the text so far."""
        assert scan_string('"A story of', 0) == ("A story of", 11, False)

    def test_simple_escapes(self):
        """All simple escapes decode."""
        text, _, closed = scan_string(r'"\" \\ \/ \b \f \n \r \t"', 0)
        assert closed
        assert text == '" \\ / \b \f \n \r \t'

    def test_unicode_escape(self):
        """\\uXXXX decodes to its code point."""
        assert scan_string(r'"caf\u00e9"', 0) == ("café", 11, True)

    def test_surrogate_pair(self):
        """A high/low surrogate pair decodes to one character."""
        text, _, closed = scan_string(r'"\ud83d\ude00"', 0)
        assert closed
        assert text == "\U0001f600"

    def test_truncated_escape_stops_before_backslash(self):
        """A buffer ending inside an escape keeps only the text before it."""
        assert scan_string('"ab\\', 0) == ("ab", 3, False)
        assert scan_string('"ab\\u00', 0) == ("ab", 3, False)

    def test_truncated_surrogate_pair(self):
        """A high surrogate without its low half is not emitted."""
        text, end, closed = scan_string(r'"x\ud83d', 0)
        assert (text, end, closed) == ("x", 2, False)

    def test_lone_low_surrogate(self):
        """A lone low surrogate stops the scan."""
        assert scan_string(r'"x\udc00y"', 0) == ("x", 2, False)

    def test_invalid_escape(self):
        """An unknown escape stops the scan."""
        assert scan_string(r'"a\qb"', 0) == ("a", 2, False)

    def test_no_partial(self):
        """Without allow_partial, an open string yields no text."""
        assert scan_string('"abc', 0, allow_partial=False) == (None, 4, False)

    def test_start_offset(self):
        """Scanning starts at the given index."""
        assert scan_string('xx"hi"', 2) == ("hi", 6, True)


# =============================================================================
# scan_number()
# =============================================================================


class TestScanNumber:
    """Tests for the number scanner."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("0", (0.0, 1)),
            ("42", (42.0, 2)),
            ("-7", (-7.0, 2)),
            ("3.25", (3.25, 4)),
            ("1e3", (1000.0, 3)),
            ("2.5E-1", (0.25, 6)),
            ("12,", (12.0, 2)),
        ],
    )
    def test_complete_numbers(self, text, expected):
        """Well-formed numbers scan in full."""
        assert scan_number(text) == expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("3.", (3.0, 1)),
            ("-12.5e", (-12.5, 5)),
            ("1e+", (1.0, 1)),
            ("4E-", (4.0, 1)),
        ],
    )
    def test_rolls_back_incomplete_suffix(self, text, expected):
        """A trailing '.' or exponent marker is not consumed."""
        assert scan_number(text) == expected

    @pytest.mark.parametrize("text", ["", "-", "abc", "-x", ".5"])
    def test_no_number(self, text):
        """No digit after the optional sign yields None."""
        assert scan_number(text) is None

    def test_leading_zero(self):
        """A leading zero ends the integer part."""
        assert scan_number("01") == (0.0, 1)

    def test_start_offset(self):
        """Scanning starts at the given index."""
        assert scan_number("ab12", 2) == (12.0, 4)


# =============================================================================
# skip_balanced() / is_balanced()
# =============================================================================


class TestBalance:
    """Tests for the balance scans."""

    def test_skip_balanced_closed(self):
        """Returns the index past the matching bracket."""
        text = '{"a": {"b": 1}} tail'
        assert skip_balanced(text, 0, "{", "}") == 15

    def test_skip_balanced_ignores_brackets_in_strings(self):
        """Brackets inside string literals do not count."""
        text = '{"a": "}", "b": "\\"}"}'
        assert skip_balanced(text, 0, "{", "}") == len(text)

    def test_skip_balanced_open(self):
        """An open container runs to the end of the buffer."""
        assert skip_balanced('[1, [2', 0, "[", "]") == 6

    @pytest.mark.parametrize(
        "text", ["{}", "[]", '{"a": [1, {"b": "]"}]}', '"abc"', "42", "  [1]  "]
    )
    def test_balanced(self, text):
        """Closed brackets and strings are balanced."""
        assert is_balanced(text)

    @pytest.mark.parametrize(
        "text", ["", "   ", "{", '{"a": "}"', '"ab', "[}", "{]", "}", '{"a": "\\"}'],
    )
    def test_not_balanced(self, text):
        """Open, mismatched or empty text is not balanced."""
        assert not is_balanced(text)


# =============================================================================
# extract() - scalars
# =============================================================================


class TestExtractScalars:
    """Tests for top-level scalar extraction."""

    def test_empty(self):
        """An empty buffer has no value."""
        assert extract("") == Extraction(None, False, 0)
        assert extract("   ").value is None

    def test_literals(self):
        """Fully spelled literals are complete."""
        assert extract("true") == Extraction(JSONBool(True), True, 4)
        assert extract("false").value == JSONBool(False)
        assert extract(" null").value == JSON_NULL

    def test_partial_literal(self):
        """A literal that is not spelled out yet has no value."""
        assert extract("tr").value is None
        assert extract("nul").value is None

    def test_number_completion(self):
        """A number is complete only once a non-numeric character follows."""
        assert extract("42") == Extraction(JSONNumber(42), False, 2)
        assert extract("42 ") == Extraction(JSONNumber(42), True, 2)
        assert extract("3.").complete is False

    def test_string(self):
        """Strings are complete at their closing quote."""
        assert extract('"done"') == Extraction(JSONString("done"), True, 6)
        assert extract('"do') == Extraction(JSONString("do"), False, 3)

    def test_not_json(self):
        """Text that starts no JSON value has no value."""
        assert extract("hello").value is None
        assert extract("-").value is None


# =============================================================================
# extract() - containers
# =============================================================================


class TestExtractContainers:
    """Tests for object and array extraction."""

    def test_partial_string_property(self):
        """An open string member is readable with the text so far."""
        result = extract('{"title": "A story of')
        assert result.value == from_python({"title": "A story of"})
        assert result.complete is False

    def test_complete_object(self):
        """A closed object is complete and ends past its brace."""
        text = '{"a": 1, "b": [true, null]}'
        result = extract(text)
        assert result.value == from_python({"a": 1, "b": [True, None]})
        assert result.complete is True
        assert result.end == len(text)

    def test_partial_key_dropped(self):
        """A member whose key is not closed is left out."""
        assert extract('{"a": "x", "ti').value == from_python({"a": "x"})

    def test_member_without_value_dropped(self):
        """A member with a key but no value yet is left out."""
        assert extract('{"a": "x", "b"').value == from_python({"a": "x"})
        assert extract('{"a": "x", "b":').value == from_python({"a": "x"})
        assert extract('{"a": "x", "b": tr').value == from_python({"a": "x"})

    def test_open_brace_only(self):
        """An opening brace alone is an empty, incomplete object."""
        result = extract("{")
        assert result.value == JSONObject()
        assert result.complete is False

    def test_partial_array(self):
        """Array elements read so far are kept."""
        result = extract("[1, 2")
        assert result.value == from_python([1, 2])
        assert result.complete is False

    def test_empty_containers(self):
        """Empty containers are complete."""
        assert extract("{}") == Extraction(JSONObject(), True, 2)
        assert extract(" [ ] ") == Extraction(JSONArray(), True, 4)

    def test_nested_partial(self):
        """Open nested containers are extracted as far as they go."""
        result = extract('{"a": {"b": [1, {"c": "d')
        assert result.value == from_python({"a": {"b": [1, {"c": "d"}]}})
        assert result.complete is False

    def test_nested_closed_inside_open(self):
        """A closed nested object inside an open one keeps its members."""
        result = extract('{"a": {"b": 1}, "c"')
        assert result.value == from_python({"a": {"b": 1}})

    def test_repeated_key(self):
        """A repeated key keeps its first position and first value."""
        result = extract('{"a": 1, "b": 2, "a": 3}')
        assert result.value.ordered_keys == ("a", "b")
        assert result.value["a"] == JSONNumber(1)

    def test_repeated_key_keeps_terminated_member(self):
        """A terminated member is not replaced while its repeat streams in."""
        for text in ['{"a": 1, "a": ', '{"a": 1, "a": 2', '{"a": 1, "a": 2}']:
            assert extract(text).value["a"] == JSONNumber(1), text

    def test_garbage_after_value(self):
        """Unexpected text after a member stops extraction."""
        result = extract('{"a": 1 x "b": 2}')
        assert result.value == from_python({"a": 1})
        assert result.complete is False

    def test_brackets_inside_strings(self):
        """Brackets in string values do not close containers."""
        result = extract('{"x": "}]", "y": [1]}')
        assert result.value == from_python({"x": "}]", "y": [1]})
        assert result.complete is True

    def test_extract_object_requires_brace(self):
        """extract_object() finds nothing when no object starts."""
        assert extract_object("[1]").value is None
        assert extract_array("{}").value is None

    def test_extract_with_start(self):
        """Container extraction can start mid-buffer."""
        assert extract_array('xx [1, 2]', 2).value == from_python([1, 2])

    def test_nesting_limit(self):
        """Very deep nesting is cut off instead of exhausting the stack."""
        result = extract("[" * (MAX_NESTING + 50))
        assert isinstance(result.value, JSONArray)
        assert result.complete is False


# =============================================================================
# Streaming properties
# =============================================================================


class TestStreamingProperties:
    """Properties that hold for every prefix of a document."""

    @pytest.mark.parametrize("document", DOCUMENTS)
    def test_never_raises_and_deterministic(self, document):
        """Extraction of any prefix succeeds and repeats identically."""
        for prefix in prefixes(document):
            assert extract(prefix) == extract(prefix)

    @pytest.mark.parametrize("document", DOCUMENTS)
    def test_monotonic(self, document):
        """Extending the buffer never changes terminated members."""
        previous = None
        for prefix in prefixes(document):
            current = extract(prefix).value
            assert _stable(previous, current), prefix
            previous = current

    @pytest.mark.parametrize("document", DOCUMENTS)
    def test_round_trip(self, document):
        """The full document extracts to the strictly parsed value."""
        result = extract(document)
        assert result.complete is True
        assert result.value == parse_complete(document)

    @pytest.mark.parametrize("document", DOCUMENTS)
    def test_completion_matches_balance(self, document):
        """Only prefixes reaching the final bracket are complete."""
        for prefix in prefixes(document):
            closed = prefix.rstrip() == document.rstrip()
            assert is_balanced(prefix) is closed, prefix
            assert extract(prefix).complete is closed, prefix


# =============================================================================
# parse_complete()
# =============================================================================


class TestParseComplete:
    """Tests for strict parsing."""

    def test_valid(self):
        """A complete document parses."""
        assert parse_complete('{"a": [1, "x"]}') == from_python({"a": [1, "x"]})

    def test_repeated_key(self):
        """A repeated key keeps its first position and first value."""
        value = parse_complete('{"a": 1, "b": 2, "a": 3}')
        assert value.ordered_keys == ("a", "b")
        assert value["a"] == JSONNumber(1)

    @pytest.mark.parametrize("text", ["1e400", "[-1e309]", "1" + "0" * 400])
    def test_number_out_of_range(self, text):
        """Numbers beyond the double range are rejected with a clear reason."""
        with pytest.raises(InvalidJSONError, match="out of range for a double"):
            parse_complete(text)

    @pytest.mark.parametrize("text", ["", "{", "[1,]", "1 2", "NaN", "{'a': 1}", "Infinity"])
    def test_invalid(self, text):
        """Malformed documents raise InvalidJSONError."""
        with pytest.raises(InvalidJSONError) as exc_info:
            parse_complete(text)
        assert exc_info.value.code == "INVALID_JSON"
        assert exc_info.value.reason

    def test_invalid_is_value_error(self):
        """InvalidJSONError is catchable as ValueError."""
        with pytest.raises(ValueError):
            parse_complete("{")
