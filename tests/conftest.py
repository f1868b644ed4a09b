"""
Global pytest fixtures for formcast tests.

This module provides:
- Configuration reset between tests
- Log capture on the formcast logger
"""

import logging

import pytest

from formcast import config


@pytest.fixture(autouse=True)
def _reset_config():
    """Restore formcast.config defaults after every test."""
    yield
    config.reset()


@pytest.fixture
def debug_logs(caplog):
    """Capture formcast debug records."""
    caplog.set_level(logging.DEBUG, logger="formcast")
    return caplog
