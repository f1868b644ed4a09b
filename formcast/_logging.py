"""
Structured logging (OpenTelemetry-compliant).

Every formcast module logs through one ``formcast`` logger. Records carry a
scope (``extract``, ``content``, ``schema``, ``resolve``, ``emit``) plus
whatever structured attributes the call site passes in ``extra``.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("resolve")
    log.debug("Resolving schema", extra={"schema": "Person", "dependencies": 3})

Environment::

    FORMCAST_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: warn)
    FORMCAST_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from ._version import __version__

__all__ = ["logger", "setup_logging", "scoped_logger", "JsonFormatter", "HumanFormatter"]

# =============================================================================
# Levels and record fields
# =============================================================================

# OpenTelemetry severity text per Python level
_LEVEL_TO_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

# Accepted level names, case-insensitive
_NAME_TO_LEVEL = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "err": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
    "none": logging.CRITICAL + 10,
}

# Levels that report where the record was emitted
_CODE_LOCATION_LEVELS = {logging.DEBUG, logging.ERROR, logging.CRITICAL}

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_FIELDS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "taskName", "scope"}


def _infer_scope(logger_name: str) -> str:
    """Infer scope from logger name when not explicitly provided."""
    if "extract" in logger_name or "stream" in logger_name:
        return "extract"
    if "resolve" in logger_name:
        return "resolve"
    if "emit" in logger_name:
        return "emit"
    if "schema" in logger_name or "convert" in logger_name:
        return "schema"
    if "content" in logger_name or "binding" in logger_name:
        return "content"
    return logger_name.rsplit(".", 1)[-1] if logger_name else "formcast"


def _package_path(filepath: str) -> str:
    """Path of a source file relative to the package root."""
    marker = "formcast/"
    if marker in filepath:
        return filepath[filepath.index(marker) + len(marker) :]
    return filepath


def _scope(record: logging.LogRecord) -> str:
    return getattr(record, "scope", None) or _infer_scope(record.name)


def _severity(record: logging.LogRecord) -> str:
    return _LEVEL_TO_SEVERITY.get(record.levelno, "INFO")


def _extra(record: logging.LogRecord) -> dict[str, Any]:
    """Attributes supplied through ``extra``, in the order they were set."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_FIELDS and not key.startswith("_")
    }


# =============================================================================
# Formatters
# =============================================================================


class JsonFormatter(logging.Formatter):
    """One JSON object per record, shaped like the OpenTelemetry log data model."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        # Microsecond clock padded to RFC3339 nanoseconds
        timestamp = f"{created:%Y-%m-%dT%H:%M:%S}.{created.microsecond * 1000:09d}Z"

        attributes: dict[str, Any] = {"scope": _scope(record), **_extra(record)}
        if record.levelno in _CODE_LOCATION_LEVELS:
            attributes["code.filepath"] = _package_path(record.pathname)
            attributes["code.lineno"] = record.lineno

        return json.dumps(
            {
                "timestamp": timestamp,
                "severityText": _severity(record),
                "body": record.getMessage(),
                "attributes": attributes,
                "resource": {"service.name": "formcast", "service.version": __version__},
            },
            separators=(",", ":"),
            default=str,
        )


class HumanFormatter(logging.Formatter):
    """
    Single-line terminal format.

    ``12:00:01 DEBUG [resolve] Resolved schema (Person) nodes=3 [schema/resolver.py:42]``

    The ``schema`` attribute is shown in parentheses after the message and
    other structured attributes follow as ``key=value``.
    """

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _CYAN = "\x1b[36m"
    _LEVEL_COLORS = {
        logging.DEBUG: "\x1b[2m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31m",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _paint(self, text: str, color: str | None) -> str:
        if not (self._use_colors and color):
            return text
        return f"{color}{text}{self._RESET}"

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        level_color = self._LEVEL_COLORS.get(record.levelno)

        parts = [
            f"{created:%H:%M:%S}",
            self._paint(f"{_severity(record):<5}", level_color),
            self._paint(f"[{_scope(record)}]", self._CYAN),
            record.getMessage(),
        ]

        extra = _extra(record)
        schema = extra.pop("schema", None)
        if schema:
            parts.append(f"({schema})")
        parts.extend(f"{key}={value}" for key, value in extra.items())

        if record.levelno in _CODE_LOCATION_LEVELS:
            location = f"[{_package_path(record.pathname)}:{record.lineno}]"
            parts.append(self._paint(location, self._DIM))

        return " ".join(parts)


# =============================================================================
# Logger Setup
# =============================================================================


def _get_log_level() -> int:
    """Level named by FORMCAST_LOG_LEVEL, WARNING when unset or unknown."""
    name = os.environ.get("FORMCAST_LOG_LEVEL", "warn")
    return _NAME_TO_LEVEL.get(name.lower(), logging.WARNING)


def _get_log_format() -> str:
    """Format named by FORMCAST_LOG_FORMAT, else human on a TTY and json otherwise."""
    fmt = os.environ.get("FORMCAST_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if _get_log_format() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


logger = logging.getLogger("formcast")


def _setup_default_handler() -> None:
    # Leave logging alone if the application configured it first
    if logger.handlers:
        return
    logger.addHandler(_create_handler())
    logger.setLevel(_get_log_level())


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
) -> None:
    """
    Configure formcast logging.

    Replaces any handlers on the ``formcast`` logger with a single stderr
    handler.

    Parameters
    ----------
    level : str or int, default "INFO"
        Level name ("debug", "info", "warn", "error", "fatal", "off"; any
        case) or a logging constant like ``logging.DEBUG``. Unknown names
        mean INFO.
    format : str, optional
        "json" or "human". If not specified, uses FORMCAST_LOG_FORMAT or
        auto-detects based on TTY.

    Examples
    --------
    >>> import formcast
    >>> formcast.setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _NAME_TO_LEVEL.get(level.lower(), logging.INFO)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if format:
        os.environ["FORMCAST_LOG_FORMAT"] = format

    logger.addHandler(_create_handler())
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Adds a fixed scope to every record, keeping per-call ``extra``."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """
    Logger adapter whose records carry ``scope``.

    Parameters
    ----------
    scope : str
        The scope name (e.g., "extract", "resolve", "emit").
    """
    return _ScopedLoggerAdapter(logger, {"scope": scope})


_setup_default_handler()
