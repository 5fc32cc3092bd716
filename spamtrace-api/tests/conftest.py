"""
Pytest configuration and fixtures for all tests.
"""

import os

import pytest

# Keep tests independent of any local .env
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from helpers import FakeResolver  # noqa: E402


@pytest.fixture
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def resolver_factory(fake_resolver):
    return lambda: fake_resolver
