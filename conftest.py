"""
Root conftest.py for pytest configuration and automatic marker assignment.

Markers are assigned from test file and function names so individual test
modules stay free of boilerplate.
"""

import pytest
from typing import List


def pytest_collection_modifyitems(config: pytest.Config, items: List[pytest.Item]) -> None:
    """
    Automatically assign markers based on test file paths and function names.
    """
    for item in items:
        # HTTP tests - by file name
        if "test_http_api.py" in str(item.fspath):
            item.add_marker(pytest.mark.http)

        # Slow tests - by function name patterns
        if any(pattern in item.name.lower() for pattern in ["concurrent", "timing"]):
            item.add_marker(pytest.mark.slow)

        # Unit tests - everything that does not go through the HTTP stack
        if not any(marker.name == "http" for marker in item.own_markers):
            item.add_marker(pytest.mark.unit)


def pytest_configure(config: pytest.Config) -> None:
    """
    Configure custom markers for the test suite.
    """
    config.addinivalue_line(
        "markers", "http: marks tests exercising the Starlette application"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, isolated)"
    )
