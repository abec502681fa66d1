# tests/integration/conftest.py
import pytest


def pytest_collection_modifyitems(items):
    """Mark tests under integration/ so `-m "not integration"` skips the HTTP-level suites."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
