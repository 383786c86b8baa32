"""Shared fixtures for lockcheck tests. No network access needed."""

import pytest

from lockcheck.engines.compliance.events import MemorySink
from lockcheck.engines.compliance.models import RepositoryRef


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def repo():
    return RepositoryRef(full_name="test-org/test-repo")
