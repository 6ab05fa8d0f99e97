"""Shared pytest fixtures."""

import pytest

from constants import Constants

_TUNABLES = ("ROOT_URI", "DEFAULT_CHUNK_SIZE", "REQUEST_TIMEOUT")


@pytest.fixture(autouse=True)
def restore_constants():
    """Config loading mutates Constants; put the defaults back after each test."""
    saved = {name: getattr(Constants, name) for name in _TUNABLES}
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)
