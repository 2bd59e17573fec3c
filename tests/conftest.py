import pytest

from mandelbrot import BOUNDED, Resolution, Viewport


@pytest.fixture
def scenario():
    """4x3 image over [-2, 1] x [-1, 1] at 50 iterations."""
    return Viewport(-2.0 + 1.0j, 1.0 - 1.0j), Resolution(4, 3), 50


# Escape indices of the scenario, checked by hand against the recurrence:
# re = -2, -1, 0, 1 across the columns and im = 1, 0, -1 down the rows.
SCENARIO_GOLDEN = [
    [0,       2,       BOUNDED, 1],
    [BOUNDED, BOUNDED, BOUNDED, 2],
    [0,       2,       BOUNDED, 1],
]


@pytest.fixture
def scenario_golden():
    return SCENARIO_GOLDEN


@pytest.fixture
def seahorse():
    """Off-center, non-square view with plenty of boundary detail."""
    return Viewport(-0.90 + 0.25j, -0.65 + 0.05j), Resolution(37, 23), 120
