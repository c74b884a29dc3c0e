# Area: Test Fixtures
"""Shared pytest fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_package_logging():
    """Drop handlers installed by setup_logging so they do not leak between tests."""
    yield
    pkg_logger = logging.getLogger("rps_dapp")
    for handler in list(pkg_logger.handlers):
        handler.close()
        pkg_logger.removeHandler(handler)
    pkg_logger.propagate = True
