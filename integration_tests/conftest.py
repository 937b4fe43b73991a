"""Integration tests run the services against a real SQLite file."""

import pytest


def pytest_collection_modifyitems(items):
    for item in items:
        if item.path.parent.name == "integration_tests":
            item.add_marker(pytest.mark.integration)
