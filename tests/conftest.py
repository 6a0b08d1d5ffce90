"""Global test fixtures."""

import os

import pytest

# Keep a developer's config file from leaking into tests
os.environ.pop("LINKSTORE_CONFIG_FILE", None)


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Point the default SQLite location at a per-test directory."""
    monkeypatch.setenv("LINKSTORE_DATA_DIR", str(tmp_path / "data"))
