"""
Core pytest configuration for the entire test suite.

No MongoDB server is needed: the collection fixtures in
tests/test_fixtures/collection_fixtures.py provide an in-memory collection
that raises the same pymongo exceptions a server would.

Domain-specific fixtures live in:
- tests/test_fixtures/collection_fixtures.py
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import logging

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Silence noisy third-party loggers at import time, before importing modules that
# might initialize them.
NOISY_LOGGERS = (
    "pymongo",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from pytest import FixtureRequest

from unique_validation.config import get_settings
from unique_validation.core.logging.builder import setup_logging

settings = get_settings()


# The `autouse=True` part means that this fixture will be automatically used by pytest
# without explicitly including it in your test function parameters.
@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest):
    """
    Install the package logging configuration for the entire test session.

    dictConfig can remove pytest's capture handler; it is re-attached when
    available so `caplog.records` keeps working.
    """
    setup_logging(settings)

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Tests that change the environment get fresh settings; others are unaffected."""
    yield
    get_settings.cache_clear()


# Collection / translator / repository fixtures
from .test_fixtures.collection_fixtures import (  # noqa: E402
    registry,
    users_collection,
    legacy_collection,
    user_schema,
    translator,
    user_repository,
    sample_user,
    make_user,
)
