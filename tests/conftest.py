"""Shared fixtures."""

import pytest

from httpbody import encoding
from httpbody.logging import configure_logging


@pytest.fixture(autouse=True)
def clean_charset_cache():
    """Each test starts with an empty charset cache."""
    encoding._clear_cache()
    yield
    encoding._clear_cache()


@pytest.fixture(autouse=True)
def default_logger_factory():
    """Undo any configure_logging() a test performed."""
    yield
    configure_logging(None)
