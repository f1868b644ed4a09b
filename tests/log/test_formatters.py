"""
Tests for OpenTelemetry-compliant log formatters.

Tests for JsonFormatter, HumanFormatter, and scoped_logger.
"""

import json
import logging
import os
from io import StringIO
from unittest.mock import patch

from formcast import GenerationSchema
from formcast._logging import (
    HumanFormatter,
    JsonFormatter,
    _get_log_format,
    _get_log_level,
    _infer_scope,
    scoped_logger,
)
from formcast.schema import ObjectSchema, PrimitiveSchema, SchemaProperty


def _record(level=logging.INFO, msg="Test", args=(), name="formcast.test", pathname="test.py"):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname=pathname,
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_otel_structure(self):
        """Output follows OpenTelemetry Logging Data Model."""
        parsed = json.loads(JsonFormatter().format(_record()))

        assert set(parsed) == {"timestamp", "severityText", "body", "attributes", "resource"}

    def test_timestamp_format(self):
        """Timestamp is RFC3339 with nanoseconds."""
        parsed = json.loads(JsonFormatter().format(_record()))

        # Should look like: 2026-01-09T11:10:47.008550065Z
        ts = parsed["timestamp"]
        assert ts.endswith("Z")
        assert "T" in ts
        assert len(ts.split(".")[-1]) == 10  # 9 digits + Z

    def test_severity_text_mapping(self):
        """Python log levels map to OpenTelemetry severity text."""
        formatter = JsonFormatter()

        test_cases = [
            (logging.DEBUG, "DEBUG"),
            (logging.INFO, "INFO"),
            (logging.WARNING, "WARN"),
            (logging.ERROR, "ERROR"),
            (logging.CRITICAL, "FATAL"),
        ]

        for level, expected_severity in test_cases:
            parsed = json.loads(formatter.format(_record(level=level)))
            assert parsed["severityText"] == expected_severity, f"Level {level}"

    def test_body_contains_message(self):
        """Body contains the formatted log message."""
        parsed = json.loads(JsonFormatter().format(_record(msg="Hello %s", args=("world",))))

        assert parsed["body"] == "Hello world"

    def test_scope_from_extra(self):
        """Scope comes from the record if provided."""
        record = _record()
        record.scope = "resolve"

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["attributes"]["scope"] == "resolve"

    def test_extra_attributes_included(self):
        """Extra attributes are included in attributes dict."""
        record = _record()
        record.schema = "Person"
        record.nodes = 3

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["attributes"]["schema"] == "Person"
        assert parsed["attributes"]["nodes"] == 3

    def test_unserializable_extra(self):
        """Attributes that are not JSON values are rendered with str()."""
        record = _record()
        record.names = {"Person"}

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["attributes"]["names"] == "{'Person'}"

    def test_resource_contains_service_info(self):
        """Resource contains service name and version."""
        parsed = json.loads(JsonFormatter().format(_record()))

        assert parsed["resource"]["service.name"] == "formcast"
        assert "service.version" in parsed["resource"]

    def test_code_location_for_debug(self):
        """DEBUG level includes code location, relative to the package."""
        record = _record(level=logging.DEBUG, pathname="/site-packages/formcast/schema/emit.py")

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["attributes"]["code.filepath"] == "schema/emit.py"
        assert parsed["attributes"]["code.lineno"] == 42

    def test_no_code_location_for_info(self):
        """INFO level does not include code location."""
        parsed = json.loads(JsonFormatter().format(_record()))

        assert "code.filepath" not in parsed["attributes"]
        assert "code.lineno" not in parsed["attributes"]


class TestHumanFormatter:
    """Tests for HumanFormatter."""

    def test_format_basic(self):
        """HumanFormatter produces readable output."""
        output = HumanFormatter(use_colors=False).format(_record(msg="Test message"))

        assert "INFO" in output
        assert "Test message" in output

    def test_time_format(self):
        """Time is formatted as HH:MM:SS."""
        output = HumanFormatter(use_colors=False).format(_record())

        time_part = output.split()[0]
        assert len(time_part) == 8
        assert time_part.count(":") == 2

    def test_scope_in_brackets(self):
        """Scope appears in square brackets."""
        record = _record()
        record.scope = "emit"

        output = HumanFormatter(use_colors=False).format(record)

        assert "[emit]" in output

    def test_schema_in_parentheses(self):
        """The schema name appears in parentheses."""
        record = _record(msg="Resolved schema")
        record.schema = "Person"

        output = HumanFormatter(use_colors=False).format(record)

        assert "Resolved schema (Person)" in output

    def test_colors_disabled(self):
        """Colors can be disabled."""
        output = HumanFormatter(use_colors=False).format(_record(level=logging.ERROR))

        assert "\x1b[" not in output

    def test_colors_enabled(self):
        """Colors are included when enabled."""
        output = HumanFormatter(use_colors=True).format(_record(level=logging.ERROR))

        assert "\x1b[31m" in output


class TestScopeInference:
    """Tests for scope inference from logger names."""

    def test_known_modules(self):
        assert _infer_scope("formcast.content.extract") == "extract"
        assert _infer_scope("formcast.content.stream") == "extract"
        assert _infer_scope("formcast.schema.resolver") == "resolve"
        assert _infer_scope("formcast.schema.emit") == "emit"
        assert _infer_scope("formcast.schema.convert") == "schema"
        assert _infer_scope("formcast.binding.hydrate") == "content"

    def test_fallback(self):
        """Unknown names use their last component."""
        assert _infer_scope("formcast.other") == "other"
        assert _infer_scope("") == "formcast"


class TestScopedLogger:
    """Tests for scoped_logger."""

    def _capture(self, log):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter())
        log.logger.addHandler(handler)
        log.logger.setLevel(logging.DEBUG)
        return stream, handler

    def test_creates_logger_adapter(self):
        """scoped_logger returns a LoggerAdapter on the formcast logger."""
        log = scoped_logger("test")

        assert isinstance(log, logging.LoggerAdapter)
        assert log.logger.name == "formcast"

    def test_extra_merges_with_scope(self):
        """Extra attributes merge with scope."""
        log = scoped_logger("extract")
        stream, handler = self._capture(log)

        try:
            log.info("Test message", extra={"chunks": 2})

            parsed = json.loads(stream.getvalue().strip())
            assert parsed["attributes"]["scope"] == "extract"
            assert parsed["attributes"]["chunks"] == 2
        finally:
            log.logger.removeHandler(handler)

    def test_resolver_records(self):
        """Schema resolution logs its node count as a structured attribute."""
        log = scoped_logger("resolve")
        stream, handler = self._capture(log)

        try:
            GenerationSchema(ObjectSchema("Person", [SchemaProperty("name", PrimitiveSchema(str))]))

            records = [json.loads(line) for line in stream.getvalue().splitlines()]
            resolved = [r for r in records if r["body"] == "Resolved schema"]
            assert resolved[0]["attributes"]["scope"] == "resolve"
            assert resolved[0]["attributes"]["schema"] == "Person"
            assert resolved[0]["attributes"]["nodes"] == 2
        finally:
            log.logger.removeHandler(handler)


class TestEnvironmentVariables:
    """Tests for environment variable handling."""

    def test_log_level_debug(self):
        """FORMCAST_LOG_LEVEL=debug sets DEBUG level."""
        with patch.dict(os.environ, {"FORMCAST_LOG_LEVEL": "debug"}):
            assert _get_log_level() == logging.DEBUG

    def test_log_level_default(self):
        """Without FORMCAST_LOG_LEVEL the level is WARNING."""
        env = {k: v for k, v in os.environ.items() if k != "FORMCAST_LOG_LEVEL"}
        with patch.dict(os.environ, env, clear=True):
            assert _get_log_level() == logging.WARNING

    def test_log_level_off(self):
        """FORMCAST_LOG_LEVEL=off disables logging."""
        with patch.dict(os.environ, {"FORMCAST_LOG_LEVEL": "off"}):
            assert _get_log_level() > logging.CRITICAL

    def test_log_level_unknown(self):
        """Unknown names fall back to WARNING."""
        with patch.dict(os.environ, {"FORMCAST_LOG_LEVEL": "loud"}):
            assert _get_log_level() == logging.WARNING

    def test_log_format(self):
        """FORMCAST_LOG_FORMAT selects the format, case-insensitively."""
        with patch.dict(os.environ, {"FORMCAST_LOG_FORMAT": "JSON"}):
            assert _get_log_format() == "json"
        with patch.dict(os.environ, {"FORMCAST_LOG_FORMAT": "human"}):
            assert _get_log_format() == "human"
