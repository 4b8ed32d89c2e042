"""Shared fixtures for the cosmic patterns test suite."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from cosmicpatterns.configuration.settings import EngineSettings, SnapshotSettings
from cosmicpatterns.storage.snapshot_store import SecureSnapshotStore
from tests.fixtures.builders import NOW
from tests.fixtures.fakes import FakeCipher, InMemorySnapshotRepository, MockKeyring


class MutableClock:
    """Callable clock tests can move forward."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def mock_keyring():
    """Create mock keyring and patch it."""
    mock = MockKeyring()
    with patch("keyring.get_password", mock.get_password), \
         patch("keyring.set_password", mock.set_password), \
         patch("keyring.delete_password", mock.delete_password):
        yield mock


@pytest.fixture
def settings(tmp_path):
    return EngineSettings(
        snapshots=SnapshotSettings(database_path=tmp_path / "snapshots.db")
    )


@pytest.fixture
def repository():
    return InMemorySnapshotRepository()


@pytest.fixture
def store(repository, clock):
    return SecureSnapshotStore(repository, FakeCipher(), settings=SnapshotSettings(), clock=clock)
