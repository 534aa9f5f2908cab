"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from factories import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
