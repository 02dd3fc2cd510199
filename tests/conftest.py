"""Shared fixtures for the QR payload server tests."""

import sys
from pathlib import Path

import pytest

# Top-level modules and scripts/ live outside any package.
root_path = Path(__file__).parent.parent
for path in (root_path, root_path / "scripts"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from app import create_app  # noqa: E402
from settings import Settings  # noqa: E402


@pytest.fixture
def settings():
    return Settings(cors_origins=("http://localhost:4200",))


@pytest.fixture
def client(settings):
    return create_app(settings).test_client()
