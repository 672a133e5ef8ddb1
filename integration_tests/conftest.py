"""Pytest configuration for integration tests."""

import os

import pytest


def pytest_collection_modifyitems(items):
    """Mark tests here as integration tests; skip them without credentials."""
    skip = pytest.mark.skip(reason="GEMINI_API_KEY not set")
    for item in items:
        if "integration_tests" in str(item.path):
            item.add_marker(pytest.mark.integration)
            if not os.getenv("GEMINI_API_KEY"):
                item.add_marker(skip)
