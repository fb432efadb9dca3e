"""Workspace-level pytest configuration and fixtures."""

import pytest

from lasr_archive.backends.in_memory import InMemoryBackend


@pytest.fixture(autouse=True, scope="function")
def isolate_in_memory_datastores():
    """Automatically clear in-memory datastores around each test.

    InMemoryBackend keeps documents in a class-level registry so that fresh
    per-call backends share data. Without isolation, records written by one
    test would be visible to the next.
    """
    InMemoryBackend.reset()

    yield  # Test runs here

    InMemoryBackend.reset()
