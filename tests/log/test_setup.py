"""
Logging configuration tests.

Tests for setup_logging(), set_log_level() and set_log_format().
"""

import logging

import pytest

import formcast
from formcast._logging import HumanFormatter, JsonFormatter, logger, setup_logging
from formcast.exceptions import ValidationError


class TestSetupLogging:
    """Tests for setup_logging() function."""

    def test_default_level(self):
        """setup_logging() defaults to INFO level."""
        setup_logging()

        assert logger.level == logging.INFO

    def test_accepts_string_level(self):
        """setup_logging() accepts string level names."""
        setup_logging("DEBUG")

        assert logger.level == logging.DEBUG

    def test_accepts_int_level(self):
        """setup_logging() accepts integer level constants."""
        setup_logging(logging.WARNING)

        assert logger.level == logging.WARNING

    def test_replaces_handlers(self):
        """setup_logging() leaves exactly one handler."""
        logger.addHandler(logging.StreamHandler())
        logger.addHandler(logging.StreamHandler())

        setup_logging("INFO")

        assert len(logger.handlers) == 1

    def test_json_format(self):
        """setup_logging(format='json') uses JsonFormatter."""
        setup_logging("INFO", format="json")

        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_human_format(self):
        """setup_logging(format='human') uses HumanFormatter."""
        setup_logging("INFO", format="human")

        assert isinstance(logger.handlers[0].formatter, HumanFormatter)


class TestLoggerHierarchy:
    """Tests for logger hierarchy."""

    def test_logger_name(self):
        assert logger.name == "formcast"

    def test_module_loggers_are_children(self):
        """Module loggers inherit the formcast level."""
        setup_logging("DEBUG")

        child = logging.getLogger("formcast.schema")

        assert child.parent is logger
        assert child.getEffectiveLevel() == logging.DEBUG


class TestLogConfig:
    """Tests for formcast.set_log_level() and formcast.set_log_format()."""

    @pytest.mark.parametrize(
        "name, level",
        [
            ("trace", logging.DEBUG),
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
            ("fatal", logging.CRITICAL),
        ],
    )
    def test_set_log_level(self, name, level):
        formcast.set_log_level(name)

        assert logger.level == level

    def test_set_log_level_case_insensitive(self):
        formcast.set_log_level("DEBUG")

        assert logger.level == logging.DEBUG

    def test_set_log_level_off(self):
        """'off' silences every level."""
        formcast.set_log_level("off")

        assert not logger.isEnabledFor(logging.CRITICAL)

    def test_set_log_level_unknown(self):
        """Unknown level names are rejected."""
        with pytest.raises(ValidationError, match="Unknown log level"):
            formcast.set_log_level("loud")

    def test_set_log_format(self):
        """set_log_format() swaps the formatter and keeps the level."""
        formcast.set_log_level("error")

        formcast.set_log_format("JSON")
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

        formcast.set_log_format("human")
        assert isinstance(logger.handlers[0].formatter, HumanFormatter)
        assert logger.level == logging.ERROR

    def test_set_log_format_unknown(self):
        with pytest.raises(ValidationError, match="Unknown log format"):
            formcast.set_log_format("xml")
