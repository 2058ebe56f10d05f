"""Shared test fixtures for readtree."""

from pathlib import Path

import pytest


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An empty directory to build a module tree in."""
    d = tmp_path / "root"
    d.mkdir()
    return d


@pytest.fixture(autouse=True)
def no_user_config(tmp_path: Path, monkeypatch):
    """Keep the developer's ~/.config/readtree out of the tests."""
    monkeypatch.setattr("readtree.config.loader.USER_CONFIG_FILE", tmp_path / "no-user-config.toml")
