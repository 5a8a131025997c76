"""Pytest configuration for reqknobs_validator tests."""

import os
import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from reqknobs_validator.settings import reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from process-wide settings and the environment."""
    for key in list(os.environ):
        if key.startswith("REQKNOBS_VALIDATOR__"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def request_data():
    """A request with every location populated."""
    return {
        "body": {
            "name": "  Ada  ",
            "email": "ada@example.com",
            "age": "36",
            "tags": ["math", "engines"],
            "items": [
                {"sku": "A-1", "qty": 2},
                {"sku": "", "qty": 0},
            ],
            "address": {"city": "London"},
        },
        "query": {"page": "2", "day": "sunday"},
        "params": {"id": "42"},
        "cookies": {},
        "headers": {"x-request-id": "abc"},
    }
