"""Shared pytest configuration for gcsman tests."""

import pytest

from tests.fixtures.storage_api import storage, storage_server  # noqa: F401


@pytest.fixture
def temp_config_dir(tmp_path, monkeypatch):
    """Point Config at a temporary directory and clear GCSMAN_* overrides."""
    import os

    for key in list(os.environ):
        if key.startswith("GCSMAN_"):
            monkeypatch.delenv(key)

    config_dir = tmp_path / ".gcsman"
    monkeypatch.setattr("gcsman.utils.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("gcsman.utils.config.CONFIG_FILE_YAML", config_dir / "config.yaml")
    return config_dir
