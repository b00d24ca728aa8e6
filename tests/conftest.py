"""Shared fixtures for cellar tests."""

import time

import pytest

from cellar import create_store


@pytest.fixture
def memory_store():
    """Create an in-memory store."""
    store = create_store("in_memory")
    yield store
    store.close()


@pytest.fixture
def persisted_path(tmp_path):
    """Persistence root that does not exist yet."""
    return tmp_path / "tmp" / "persisted"


@pytest.fixture
def persisted_store(persisted_path):
    """Create a store persisting to a temporary directory."""
    store = create_store("persisted", path=str(persisted_path))
    yield store
    store.close()


@pytest.fixture
def wait_until():
    """Poll a predicate until it returns True or the timeout elapses."""

    def _wait_until(predicate, timeout=0.5, interval=0.01):
        deadline = time.monotonic() + timeout
        while True:
            if predicate():
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(interval)

    return _wait_until
