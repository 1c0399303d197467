"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from tests.test_utils.env_helpers import SimulatedTwiggitEnv


@pytest.fixture
def env(tmp_path: Path) -> SimulatedTwiggitEnv:
    """Create an empty projects/worktrees layout under tmp_path."""
    return SimulatedTwiggitEnv(tmp_path)
