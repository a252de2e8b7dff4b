"""
Shared pytest configuration for the trade analytics test suite.

Essential tests cover the analytics engine and the loader, the pieces every
report depends on.
"""

import json

import pytest

from tests.fixtures.test_data import SAMPLE_RECORDS

ESSENTIAL_MODULES = ("test_trade_analytics_engine", "test_trade_loader")


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line(
        "markers", "essential: mark test as essential for production readiness"
    )


def pytest_collection_modifyitems(config, items):
    """Mark the engine and loader tests as essential."""
    for item in items:
        if any(name in item.nodeid for name in ESSENTIAL_MODULES):
            item.add_marker(pytest.mark.essential)


@pytest.fixture
def trades_file(tmp_path):
    """A JSON export holding SAMPLE_RECORDS."""
    path = tmp_path / "trades_export.json"
    path.write_text(json.dumps(SAMPLE_RECORDS), encoding="utf-8")
    return path
