"""Pytest configuration and shared fixtures."""

import pytest
from pathlib import Path


@pytest.fixture
def tmp_replay_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for test replays."""
    replay_dir = tmp_path / "replays"
    replay_dir.mkdir()
    return replay_dir


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Path for a config file that does not exist yet."""
    return tmp_path / "config.toml"
