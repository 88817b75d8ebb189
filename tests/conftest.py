"""Shared fixtures for ghchecks tests."""

import pytest

from tests.helpers import FakeClock


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the real home directory and tokens."""
    monkeypatch.setenv('HOME', str(tmp_path))
    for var in ('GITHUB_TOKEN', 'GHCHECKS_GITHUB_TOKEN', 'GHCHECKS_CREDENTIALS',
                'GHCHECKS_CONFIG', 'GHCHECKS_FORMAT', 'GHCHECKS_PROGRESS'):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def clock():
    return FakeClock()
