"""
Shared fixtures for gridmesh tests.
"""

import pytest

from helpers import build_grid

from gridmesh.grid.models import Grid


@pytest.fixture
def grid() -> Grid:
    """3 x 3 unrefined grid anchored at the origin with spacing 5."""
    return build_grid()
