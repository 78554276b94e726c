"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make tests/helpers.py importable from every test directory
sys.path.insert(0, str(Path(__file__).parent))

from helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at a fixed UTC instant until advanced."""
    return FakeClock()
