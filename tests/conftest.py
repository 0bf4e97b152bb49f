"""Shared pytest fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def _clean_archiclaw_env(monkeypatch):
    """Keep ARCHICLAW_* variables of the calling shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("ARCHICLAW_"):
            monkeypatch.delenv(name)


@pytest.fixture
def landscape_root(tmp_path):
    """A valid seed landscape under tmp_path/landscape."""
    from tests.landscape_helpers import write_seed_landscape

    return write_seed_landscape(tmp_path / "landscape")


@pytest.fixture
def seed_landscape(landscape_root):
    """Loaded snapshot of the seed landscape."""
    from archiclaw.core.snapshot import Landscape

    return Landscape.load(landscape_root)
