"""Fixtures for logging tests."""

import os

import pytest

from formcast._logging import logger


@pytest.fixture(autouse=True)
def _restore_logger():
    """Put the formcast logger and its format variable back the way the test found them."""
    fmt = os.environ.get("FORMCAST_LOG_FORMAT")
    handlers = logger.handlers[:]
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    if fmt is None:
        os.environ.pop("FORMCAST_LOG_FORMAT", None)
    else:
        os.environ["FORMCAST_LOG_FORMAT"] = fmt
